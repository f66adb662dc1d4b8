from core.utils.constants import ID_ALPHABET, OBJECT_ID_LENGTH, SHORT_CODE_LENGTH
from core.utils.ids import new_object_id, new_short_code


class TestIdentifiers:
    def test_object_id_length_and_alphabet(self) -> None:
        image_id = new_object_id()

        assert len(image_id) == OBJECT_ID_LENGTH
        assert set(image_id) <= set(ID_ALPHABET)

    def test_short_code_length_and_alphabet(self) -> None:
        code = new_short_code()

        assert len(code) == SHORT_CODE_LENGTH
        assert set(code) <= set(ID_ALPHABET)

    def test_identifiers_are_url_safe(self) -> None:
        for _ in range(50):
            value = new_object_id() + new_short_code()
            assert "/" not in value
            assert "+" not in value
            assert "=" not in value

    def test_identifiers_do_not_repeat(self) -> None:
        ids = {new_object_id() for _ in range(1000)}

        assert len(ids) == 1000
