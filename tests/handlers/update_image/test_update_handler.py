import json

from core.services.image_service import ImageService
from handlers.update_image.handler import handler


def _event(image_id: str, body) -> dict:
    return {
        "httpMethod": "PATCH",
        "pathParameters": {"image_id": image_id},
        "body": json.dumps(body),
    }


class TestUpdateImageHandler:
    def test_update_tags(self, lambda_context, stored_image, service: ImageService) -> None:
        response = handler(_event(stored_image.image_id, {"tags": "night, stars"}), lambda_context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["tags"] == ["night", "stars"]
        assert body["description"] == "Evening sky"
        assert service.get_image(stored_image.image_id).tags == ["night", "stars"]

    def test_clear_tags_and_set_description(self, lambda_context, stored_image) -> None:
        event = _event(stored_image.image_id, {"tags": [], "description": "Dusk"})

        body = json.loads(handler(event, lambda_context)["body"])

        assert body["tags"] == []
        assert body["description"] == "Dusk"

    def test_nothing_to_update(self, lambda_context, stored_image) -> None:
        response = handler(_event(stored_image.image_id, {}), lambda_context)

        assert response["statusCode"] == 422

    def test_too_many_tags(self, lambda_context, stored_image) -> None:
        response = handler(
            _event(stored_image.image_id, {"tags": [f"t{i}" for i in range(11)]}),
            lambda_context,
        )

        assert response["statusCode"] == 422

    def test_unknown_image(self, lambda_context) -> None:
        response = handler(_event("missing", {"description": "x"}), lambda_context)

        assert response["statusCode"] == 404

    def test_body_must_be_object(self, lambda_context, stored_image) -> None:
        response = handler(_event(stored_image.image_id, ["tags"]), lambda_context)

        assert response["statusCode"] == 400
