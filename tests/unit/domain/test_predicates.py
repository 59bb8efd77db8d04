"""Tests for marketstore/domain/models/predicates.py."""

from datetime import datetime, timedelta, timezone

import pytest

from marketstore.domain.errors import InvalidArgument
from marketstore.domain.models.enums import DiscountType
from marketstore.domain.models.predicates import NOT_DELETED, Condition, Operator, Predicate


# --- construction ---

def test_of_none_is_empty():
    assert Predicate.of(None).conditions == ()


def test_of_returns_existing_predicate_unchanged():
    p = Predicate.of({"code": "A"})
    assert Predicate.of(p) is p


def test_of_plain_value_is_equality():
    p = Predicate.of({"code": "SPRING10"})
    assert p.conditions == (Condition("code", Operator.EQ, "SPRING10"),)


def test_of_operator_mapping_expands_each_operator():
    p = Predicate.of({"usageLimit": {"$gt": 0, "$lte": 10}})
    assert {c.operator for c in p.conditions} == {Operator.GT, Operator.LTE}


def test_of_rejects_unknown_operator():
    with pytest.raises(InvalidArgument):
        Predicate.of({"code": {"$regex": "^A"}})


def test_exists_requires_boolean():
    with pytest.raises(InvalidArgument):
        Predicate.of({"deletedAt": {"$exists": 1}})


def test_in_requires_list():
    with pytest.raises(InvalidArgument):
        Predicate.of({"id": {"$in": "abc"}})


def test_values_are_normalised_to_json_form():
    p = Predicate.of({"discountType": DiscountType.PERCENTAGE})
    assert p.conditions[0].value == "percentage"


def test_datetime_values_stay_typed_in_utc():
    when = datetime(2026, 1, 1, 7, tzinfo=timezone(timedelta(hours=-5)))
    (condition,) = Predicate.of({"createdAt": {"$gte": when}}).conditions
    assert condition.value == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
    assert condition.value.tzinfo is timezone.utc


def test_in_accepts_tuple():
    p = Predicate.of({"userId": {"$in": ("u1", "u2")}})
    assert p.conditions[0].value == ("u1", "u2")


def test_plain_mapping_without_operators_is_equality_on_the_mapping():
    p = Predicate.of({"metaData": {"tier": "gold"}})
    assert p.conditions[0].operator is Operator.EQ


# --- matching ---

def test_equality_matches():
    assert Predicate.of({"code": "A"}).matches({"code": "A"})
    assert not Predicate.of({"code": "A"}).matches({"code": "B"})


def test_missing_field_never_matches_comparison():
    assert not Predicate.of({"usageLimit": {"$gt": 0}}).matches({})


def test_null_equality_matches_missing_field():
    p = Predicate.of({"code": None})
    assert p.matches({})
    assert p.matches({"code": None})
    assert not p.matches({"code": "A"})


def test_in_with_null_matches_missing_field():
    p = Predicate.of({"code": {"$in": ["A", None]}})
    assert p.matches({})
    assert p.matches({"code": "A"})
    assert not Predicate.of({"code": {"$in": ["A"]}}).matches({})


def test_exists_false_matches_absent_key():
    assert NOT_DELETED.matches({"id": "x"})
    assert not NOT_DELETED.matches({"id": "x", "deletedAt": "2026-01-01T00:00:00Z"})


def test_exists_true_matches_present_key():
    assert Predicate.of({"deletedAt": {"$exists": True}}).matches({"deletedAt": None})


def test_in_matches_membership():
    p = Predicate.of({"userId": {"$in": ["u1", "u2"]}})
    assert p.matches({"userId": "u2"})
    assert not p.matches({"userId": "u3"})


def test_ordering_on_strings():
    p = Predicate.of({"id": {"$gt": "b", "$lt": "d"}})
    assert p.matches({"id": "c"})
    assert not p.matches({"id": "d"})


def test_ordering_on_mixed_types_does_not_match():
    assert not Predicate.of({"usageLimit": {"$gt": 1}}).matches({"usageLimit": "many"})


# Stored timestamps without and with a fractional part.
WHOLE = "2026-06-01T00:00:00Z"
HALF = "2026-06-01T00:00:00.500000Z"


def test_datetime_bound_compares_instants_across_fractional_seconds():
    bound = datetime(2026, 6, 1, 0, 0, 0, 250000, tzinfo=timezone.utc)
    p = Predicate.of({"expiresAt": {"$gt": bound}})
    assert not p.matches({"expiresAt": WHOLE})
    assert p.matches({"expiresAt": HALF})


def test_datetime_bound_with_offset_compares_in_utc():
    # 20:00 at UTC-5 is 01:00 UTC the next day.
    bound = datetime(2026, 5, 31, 20, tzinfo=timezone(timedelta(hours=-5)))
    p = Predicate.of({"expiresAt": {"$lt": bound}})
    assert p.matches({"expiresAt": WHOLE})
    assert p.matches({"expiresAt": "2026-06-01T00:59:59.999999+00:00"})
    assert not p.matches({"expiresAt": "2026-06-01T01:00:00.000000Z"})


def test_datetime_equality_ignores_stored_precision():
    when = datetime(2026, 6, 1, tzinfo=timezone.utc)
    assert Predicate.of({"expiresAt": when}).matches({"expiresAt": WHOLE})
    assert Predicate.of({"expiresAt": {"$in": [when]}}).matches({"expiresAt": WHOLE})


def test_datetime_bound_never_matches_non_timestamp():
    bound = datetime(2026, 6, 1, tzinfo=timezone.utc)
    assert not Predicate.of({"expiresAt": {"$gte": bound}}).matches({"expiresAt": "soon"})
    assert not Predicate.of({"expiresAt": {"$gte": bound}}).matches({"expiresAt": 3})


def test_empty_predicate_matches_everything():
    assert Predicate().matches({"anything": 1})


def test_and_concatenates_conditions():
    combined = Predicate.of({"code": "A"}) & {"isActive": True}
    assert combined.matches({"code": "A", "isActive": True})
    assert not combined.matches({"code": "A", "isActive": False})


# --- canonical form ---

def test_canonical_ignores_condition_order():
    a = Predicate.of({"code": "A", "isActive": True})
    b = Predicate.of({"isActive": True, "code": "A"})
    assert a.canonical() == b.canonical()


def test_canonical_drops_duplicates():
    p = Predicate.of({"code": "A"}) & {"code": "A"}
    assert len(p.canonical()) == 1


def test_canonical_distinguishes_values():
    assert Predicate.of({"code": "A"}).canonical() != Predicate.of({"code": "B"}).canonical()


def test_canonical_renders_datetimes_in_stored_form():
    utc = datetime(2026, 6, 1, 12, tzinfo=timezone.utc)
    shifted = datetime(2026, 6, 1, 14, tzinfo=timezone(timedelta(hours=2)))
    a = Predicate.of({"expiresAt": {"$gt": utc}})
    b = Predicate.of({"expiresAt": {"$gt": shifted}})
    assert a.canonical() == b.canonical() == [["expiresAt", "$gt", "2026-06-01T12:00:00.000000Z"]]


def test_canonical_renders_in_values_as_list():
    p = Predicate.of({"userId": {"$in": ["u1", "u2"]}})
    assert p.canonical() == [["userId", "$in", ["u1", "u2"]]]
