"""Tests for the language-model estimator."""

import asyncio
from string import Template

import pytest

from calorie_logger.domain.errors import EstimatorError
from calorie_logger.domain.estimates import NameList, PortionEstimate
from calorie_logger.services.estimator import LanguageModelEstimator, extract_json
from tests.conftest import FakeTextClient, build_estimator, failing_responder

_TEMPLATE = Template('List the dishes in "$description"')


def test_extract_json_ignores_surrounding_prose() -> None:
    text = 'Sure! Here you go: ["eggs", "toast"] Hope that helps [1, 2]'

    assert extract_json(text, list) == ["eggs", "toast"]


def test_extract_json_reads_markdown_fence() -> None:
    text = '```json\n{"grams": 45, "portion": "1 patty"}\n```'

    assert extract_json(text, dict) == {"grams": 45, "portion": "1 patty"}


def test_extract_json_skips_unbalanced_candidates() -> None:
    text = 'The list [is broken, but then ["rice", "beans"] works'

    assert extract_json(text, list) == ["rice", "beans"]


def test_extract_json_handles_brackets_inside_strings() -> None:
    text = '["fish [battered]", "chips"]'

    assert extract_json(text, list) == ["fish [battered]", "chips"]


def test_extract_json_returns_none_without_match() -> None:
    assert extract_json("I could not tell, sorry.", dict) is None
    assert extract_json("", list) is None
    assert extract_json('{"only": "an object"}', list) is None


def test_query_substitutes_variables_and_returns_value() -> None:
    client = FakeTextClient(lambda prompt: '["burger", "fries"]')
    estimator = LanguageModelEstimator(client=client, model="test-model")

    result = asyncio.run(
        estimator.query(_TEMPLATE, {"description": "burger and fries"}, list)
    )

    assert result == ["burger", "fries"]
    assert client.prompts == ['List the dishes in "burger and fries"']


def test_query_raises_service_unavailable_on_client_failure() -> None:
    estimator = build_estimator(failing_responder)

    with pytest.raises(EstimatorError) as excinfo:
        asyncio.run(estimator.query(_TEMPLATE, {"description": "soup"}, list))

    assert excinfo.value.reason == "service-unavailable"
    assert excinfo.value.raw is None


def test_query_raises_malformed_output_with_raw_text() -> None:
    estimator = build_estimator(lambda prompt: "no json here")

    with pytest.raises(EstimatorError) as excinfo:
        asyncio.run(estimator.query(_TEMPLATE, {"description": "soup"}, list))

    assert excinfo.value.is_malformed
    assert excinfo.value.raw == "no json here"


def test_query_treats_deeply_nested_output_as_malformed() -> None:
    estimator = build_estimator(lambda prompt: "[" * 100000)

    assert extract_json("[" * 100000, list) is None
    with pytest.raises(EstimatorError) as excinfo:
        asyncio.run(estimator.query(_TEMPLATE, {"description": "soup"}, list))

    assert excinfo.value.is_malformed


def test_query_model_validates_schema() -> None:
    estimator = build_estimator(lambda prompt: '{"grams": 120, "portion": "1 cup"}')

    result = asyncio.run(
        estimator.query_model(_TEMPLATE, {"description": "rice"}, PortionEstimate)
    )

    assert result.grams == 120
    assert result.portion == "1 cup"


def test_query_model_rejects_non_positive_grams() -> None:
    estimator = build_estimator(lambda prompt: '{"grams": 0}')

    with pytest.raises(EstimatorError) as excinfo:
        asyncio.run(
            estimator.query_model(_TEMPLATE, {"description": "rice"}, PortionEstimate)
        )

    assert excinfo.value.is_malformed


def test_query_model_rejects_wrong_item_types() -> None:
    estimator = build_estimator(lambda prompt: '[{"name": "rice"}]')

    with pytest.raises(EstimatorError):
        asyncio.run(
            estimator.query_model(
                _TEMPLATE, {"description": "rice"}, NameList, expect=list
            )
        )
