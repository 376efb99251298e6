from django.http import HttpResponse
from rest_framework import permissions, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from ..pdf.claim_pdf import claim_file_name, claim_reference, generate_claim_pdf
from ..pdf.logo import load_logo
from ..serializers import ClaimSerializer, DocumentIdsSerializer, DocumentUploadSerializer
from ..services import document_service
from ..services.scope import requester_for


class DocumentListView(APIView):
    """``GET ?folder=`` lists documents with public URLs; ``POST`` uploads one."""

    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get(self, request):
        rows = document_service.list_documents(request.query_params.get("folder"))
        for row in rows:
            row["public_url"] = document_service.get_public_url(row["file_path"])
            row["is_image"] = document_service.is_image_file(row.get("file_type"))
            row["is_pdf"] = document_service.is_pdf_file(row.get("file_type"))
        return Response(rows)

    def post(self, request):
        serializer = DocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data["file"]
        row = document_service.upload_document(
            serializer.validated_data["folder"],
            upload.name,
            upload.read(),
            uploaded_by=requester_for(request.user).user_id,
            description=serializer.validated_data.get("description") or None,
        )
        return Response(row, status=status.HTTP_201_CREATED)


class DocumentDeleteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = DocumentIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted = document_service.delete_documents(serializer.validated_data["ids"])
        return Response({"deleted": deleted, "detail": f"{deleted} document(s) deleted successfully"})


class DocumentDownloadView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, path):
        content = document_service.download_document(path)
        response = HttpResponse(content, content_type="application/octet-stream")
        response["Content-Disposition"] = f'attachment; filename="{path.rsplit("/", 1)[-1]}"'
        return response


class ClaimLetterView(APIView):
    """Render a vendor claim letter PDF from the posted claim."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ClaimSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        claim = dict(serializer.validated_data)
        claim["claim_number"] = claim_reference(claim)
        response = HttpResponse(generate_claim_pdf(claim, logo=load_logo()), content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{claim_file_name(claim)}"'
        return response
