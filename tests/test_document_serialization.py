"""Tests for document schemas and their JSON wire format."""

import json

import pytest

from crpt_client.core.errors import ValidationAppError
from crpt_client.schemas.document import Description, Document, Product
from crpt_client.services.submission_service import serialize_document


def test_serializes_with_camel_case_keys_and_nulls() -> None:
    document = Document(
        doc_id="doc-42",
        doc_type="LP_INTRODUCE_GOODS",
        description=Description(participant_inn="7700000000"),
        products=[Product(tnved_code="6401100000", uitu_code="U-1")],
    )

    payload = json.loads(serialize_document(document))

    assert payload["docId"] == "doc-42"
    assert payload["docType"] == "LP_INTRODUCE_GOODS"
    assert payload["description"] == {"participantInn": "7700000000"}
    assert payload["importRequest"] is False
    assert payload["regNumber"] is None
    product = payload["products"][0]
    assert product["tnvedCode"] == "6401100000"
    assert product["uituCode"] == "U-1"
    assert product["certificateDocumentDate"] is None
    assert "tnved_code" not in product


def test_serialized_payload_is_utf8_bytes() -> None:
    body = serialize_document(Document(production_type="собственное производство"))

    assert isinstance(body, bytes)
    assert json.loads(body.decode("utf-8"))["productionType"] == "собственное производство"


def test_accepts_mapping_with_wire_or_python_keys() -> None:
    from_wire = json.loads(serialize_document({"docId": "1", "importRequest": True}))
    from_python = json.loads(serialize_document({"doc_id": "1", "import_request": True}))

    assert from_wire == from_python
    assert from_wire["importRequest"] is True


def test_defaults_for_empty_document() -> None:
    payload = json.loads(serialize_document(Document()))

    assert payload["products"] == []
    assert payload["description"] is None
    assert payload["importRequest"] is False


def test_invalid_mapping_raises_validation_error() -> None:
    with pytest.raises(ValidationAppError) as exc:
        serialize_document({"products": "not-a-list"})

    assert exc.value.code == "invalid_document"
    assert exc.value.details["context"]["errors"]
