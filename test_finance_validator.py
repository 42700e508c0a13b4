import pytest

from domains.finance.schemas import (
    CompanyHealthScoreInput,
    OrganicGrowthInput,
    RevenueListInput,
    SegmentGrowthMapInput,
    VectorStoreLookupInput,
)
from domains.finance.validator import format_location, validate_arguments
from shared.errors import ErrorKind, InvalidArgumentError, sanitize_for_message

HEALTH_ARGS = {"revenue_growth": 0.09, "sla_compliance": 0.985, "customer_satisfaction": 89}


def _invalid(model, arguments) -> InvalidArgumentError:
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_arguments(model, arguments)
    assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
    return exc_info.value


def test_valid_arguments_decode_into_typed_request() -> None:
    request = validate_arguments(CompanyHealthScoreInput, HEALTH_ARGS)
    assert isinstance(request, CompanyHealthScoreInput)
    assert request.customer_satisfaction == 89.0
    assert request.modern_revenue_pct is None


def test_argument_bag_must_be_an_object() -> None:
    error = _invalid(CompanyHealthScoreInput, [0.09, 0.985, 89])
    assert error.field == "arguments"


def test_missing_required_field_is_named() -> None:
    error = _invalid(CompanyHealthScoreInput, {"sla_compliance": 0.9, "customer_satisfaction": 80})
    assert error.field == "revenue_growth"
    assert "revenue_growth" in error.message


def test_strings_and_booleans_are_not_numbers() -> None:
    error = _invalid(CompanyHealthScoreInput, {**HEALTH_ARGS, "revenue_growth": "0.09"})
    assert error.field == "revenue_growth"
    assert "number" in error.message

    error = _invalid(CompanyHealthScoreInput, {**HEALTH_ARGS, "sla_compliance": True})
    assert error.field == "sla_compliance"


def test_non_finite_numbers_are_rejected() -> None:
    error = _invalid(OrganicGrowthInput, {"revenue_prior": float("nan"), "revenue_current": 10})
    assert error.field == "revenue_prior"
    error = _invalid(OrganicGrowthInput, {"revenue_prior": 10, "revenue_current": float("inf")})
    assert error.field == "revenue_current"


def test_bounded_ranges() -> None:
    assert _invalid(CompanyHealthScoreInput, {**HEALTH_ARGS, "sla_compliance": 1.2}).field == "sla_compliance"
    assert _invalid(CompanyHealthScoreInput, {**HEALTH_ARGS, "customer_satisfaction": 101}).field == "customer_satisfaction"
    assert _invalid(OrganicGrowthInput, {"revenue_prior": 1, "revenue_current": 2, "period_years": 0}).field == "period_years"


def test_nested_field_uses_dotted_path() -> None:
    error = _invalid(SegmentGrowthMapInput, {"segments": {"legacy": {"revenue": -1, "growth_rate": 0.1}}})
    assert error.field == "segments.legacy.revenue"


def test_list_index_in_path() -> None:
    error = _invalid(RevenueListInput, {"revenues": [10, "x", 5]})
    assert error.field == "revenues[1]"


def test_collections_must_be_non_empty() -> None:
    assert _invalid(RevenueListInput, {"revenues": []}).field == "revenues"
    assert _invalid(SegmentGrowthMapInput, {"segments": {}}).field == "segments"


def test_segment_labels_are_sanitized_in_messages() -> None:
    error = _invalid(SegmentGrowthMapInput, {"segments": {"<script>\n": {"revenue": "x", "growth_rate": 0.1}}})
    assert "<" not in error.message
    assert "\n" not in error.message
    assert error.field == "segments.?script? .revenue"


def test_vector_store_lookup_bounds() -> None:
    base = {"function_name": "gini_coefficient", "company_name": "Acme"}
    assert _invalid(VectorStoreLookupInput, {**base, "max_num_results": 0}).field == "max_num_results"
    assert _invalid(VectorStoreLookupInput, {**base, "max_num_results": 101}).field == "max_num_results"
    assert _invalid(VectorStoreLookupInput, {**base, "max_num_results": 10.0}).field == "max_num_results"
    assert _invalid(VectorStoreLookupInput, {**base, "score_threshold": 1.5}).field == "score_threshold"
    assert _invalid(VectorStoreLookupInput, {**base, "company_name": ""}).field == "company_name"
    assert _invalid(VectorStoreLookupInput, {**base, "company_name": "   "}).field == "company_name"

    request = validate_arguments(VectorStoreLookupInput, {**base, "company_name": "  Acme Corp "})
    assert request.company_name == "Acme Corp"


def test_vector_store_lookup_function_name() -> None:
    request = validate_arguments(
        VectorStoreLookupInput, {"function_name": "calculate_gini_coefficient", "company_name": "Acme"}
    )
    assert request.function_name == "gini_coefficient"
    assert request.max_num_results == 10
    assert request.ranker == "auto"

    error = _invalid(VectorStoreLookupInput, {"function_name": "price_target", "company_name": "Acme"})
    assert error.field == "function_name"


def test_format_location() -> None:
    assert format_location(()) == "arguments"
    assert format_location(("segments", "a", "fy_prior")) == "segments.a.fy_prior"
    assert format_location(("revenues", 3)) == "revenues[3]"


def test_sanitize_for_message_truncates_and_replaces() -> None:
    assert sanitize_for_message("a" * 80) == "a" * 47 + "..."
    assert sanitize_for_message('x"y\'z`\\<>') == "x?y?z????"
    assert sanitize_for_message("tab\there") == "tab here"
