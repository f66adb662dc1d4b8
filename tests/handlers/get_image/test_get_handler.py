import json

from handlers.get_image.handler import handler


class TestGetImageHandler:
    def test_get_image_success(self, lambda_context, stored_image) -> None:
        event = {"pathParameters": {"image_id": stored_image.image_id}}

        response = handler(event, lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["image_id"] == stored_image.image_id
        assert body["short_code"] == stored_image.short_code
        assert body["tags"] == ["sky", "evening"]
        assert body["preview_url"] == f"https://api.example.com/objects/{stored_image.image_id}/preview"

    def test_get_image_not_found(self, lambda_context) -> None:
        response = handler({"pathParameters": {"image_id": "missing"}}, lambda_context)

        assert response["statusCode"] == 404
        assert json.loads(response["body"])["error"] == "IMAGE_NOT_FOUND"

    def test_missing_image_id(self, lambda_context) -> None:
        response = handler({"pathParameters": None}, lambda_context)

        assert response["statusCode"] == 422

    def test_path_traversal_rejected(self, lambda_context) -> None:
        response = handler({"pathParameters": {"image_id": "../quota/john"}}, lambda_context)

        assert response["statusCode"] == 422
