import json

import pytest

from inventorymsa.cdc import build_record_body, marshall, parse_new_image, unmarshall
from inventorymsa.core import InvalidArgumentsError


def test_unmarshall_nested_attribute_values():
    image = {
        "eventName": {"S": "ORDER_CREATED_EVENT"},
        "eventData": {
            "M": {
                "units": {"N": "3"},
                "price": {"N": "10.5"},
                "tags": {"L": [{"S": "a"}, {"BOOL": True}, {"NULL": True}]},
            }
        },
    }
    assert unmarshall(image) == {
        "eventName": "ORDER_CREATED_EVENT",
        "eventData": {"units": 3, "price": 10.5, "tags": ["a", True, None]},
    }


def test_marshall_is_inverse_of_unmarshall():
    data = {"a": "x", "b": 2, "c": {"d": [1.5, False]}}
    assert unmarshall(marshall(data)) == data


def test_parse_new_image_from_message_body():
    body = build_record_body({"eventName": "SKU_RESTOCKED_EVENT", "units": 4})
    assert parse_new_image(body) == {"eventName": "SKU_RESTOCKED_EVENT", "units": 4}


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        json.dumps({"detail": {}}),
        json.dumps([1, 2, 3]),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"x": {"Q": "1"}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"x": {"N": "abc"}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"eventName": {"L": 5}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"eventName": {"NS": 5}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"eventName": {"SS": 3}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"x": {"M": {"tags": {"SS": 3}}}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"x": {"L": "abc"}}}}}),
        json.dumps({"detail": {"dynamodb": {"NewImage": {"x": {"NS": [{"N": "1"}]}}}}}),
    ],
)
def test_malformed_bodies_are_invalid_arguments(body):
    with pytest.raises(InvalidArgumentsError):
        parse_new_image(body)


def test_string_and_number_sets():
    image = {"tags": {"SS": ["a", "b"]}, "sizes": {"NS": ["1", "2.5"]}}
    assert unmarshall(image) == {"tags": {"a", "b"}, "sizes": {1, 2.5}}


def test_deeply_nested_image_is_invalid_arguments():
    depth = 5000
    image = '{"L": [' * depth + '{"S": "leaf"}' + "]}" * depth
    body = '{"detail": {"dynamodb": {"NewImage": {"x": ' + image + "}}}}"
    with pytest.raises(InvalidArgumentsError):
        parse_new_image(body)
