from django.http import QueryDict


def plain_data(request):
    """Return a mutable copy of ``request.data`` with one value per key.

    Form-encoded bodies arrive as a ``QueryDict``; ``dict()`` on one would
    keep every value as a list.
    """
    if isinstance(request.data, QueryDict):
        return request.data.dict()
    return dict(request.data)
