from __future__ import annotations

import pytest

from apishape_app.shapes import UNKNOWN_IDENTIFIER, APIShape, identifier_of, known_shapes, parse_shape


def test_known_identifiers() -> None:
    assert identifier_of(APIShape.NETWORKING_V1) == "networking.k8s.io/v1"
    assert identifier_of(APIShape.NETWORKING_V1BETA1) == "networking.k8s.io/v1beta1"
    assert identifier_of(APIShape.EXTENSIONS_V1BETA1) == "extensions/v1beta1"


def test_identifiers_are_total_and_injective() -> None:
    identifiers = [identifier_of(shape) for shape in known_shapes()]
    assert set(known_shapes()) == set(APIShape) - {APIShape.UNKNOWN}
    assert len(set(identifiers)) == len(identifiers)
    assert UNKNOWN_IDENTIFIER not in identifiers


def test_unknown_is_descriptive() -> None:
    assert identifier_of(APIShape.UNKNOWN) == "unknown API"
    assert str(APIShape.UNKNOWN) == "unknown API"


def test_default_order_is_newest_first() -> None:
    assert known_shapes()[0] is APIShape.NETWORKING_V1


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("networking.k8s.io/v1", APIShape.NETWORKING_V1),
        ("networking_v1beta1", APIShape.NETWORKING_V1BETA1),
        (" EXTENSIONS_V1BETA1 ", APIShape.EXTENSIONS_V1BETA1),
    ],
)
def test_parse_shape(text: str, expected: APIShape) -> None:
    assert parse_shape(text) is expected


@pytest.mark.parametrize("text", ["unknown", "unknown API", "networking.k8s.io/v2", ""])
def test_parse_shape_rejects_unknown(text: str) -> None:
    with pytest.raises(ValueError):
        parse_shape(text)
