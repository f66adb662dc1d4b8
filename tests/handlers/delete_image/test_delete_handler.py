import json

from core.models.image import ImageQuery
from core.services.image_service import ImageService
from handlers.delete_image.handler import handler


class TestDeleteImageHandler:
    def test_delete_image_success(self, lambda_context, stored_image, service: ImageService) -> None:
        event = {"pathParameters": {"image_id": stored_image.image_id}}

        response = handler(event, lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["image_id"] == stored_image.image_id
        assert body["message"] == "Image deleted successfully"
        assert "deleted_at" in body

        assert service.list_images(ImageQuery()).total_count == 0
        assert handler(event, lambda_context)["statusCode"] == 404

    def test_delete_image_not_found(self, lambda_context) -> None:
        response = handler({"pathParameters": {"image_id": "missing"}}, lambda_context)

        assert response["statusCode"] == 404
        body = json.loads(response["body"])
        assert body["message"] == "Image not found: missing"

    def test_delete_missing_image_id(self, lambda_context) -> None:
        response = handler({"pathParameters": None}, lambda_context)

        assert response["statusCode"] == 422

    def test_delete_invalid_image_id(self, lambda_context) -> None:
        response = handler({"pathParameters": {"image_id": "a/b"}}, lambda_context)

        assert response["statusCode"] == 422
