"""Tests for query-string filter translation."""
from bson import ObjectId

from catalog.utils.filters import build_filter, parse_limit, parse_sort

VALID_ID = "64b7f0c2a1b2c3d4e5f60718"


def test_eq_and_neq():
    """Test exact and negated matches."""
    assert build_filter({"color[eq]": "Red"}) == {"color": "Red"}
    assert build_filter({"color[neq]": "Red"}) == {"color": {"$ne": "Red"}}


def test_relational_operators_parse_numbers():
    """Test gt/gte/lt/lte compare numerically when the value is a number."""
    assert build_filter({"price[gt]": "10"}) == {"price": {"$gt": 10.0}}
    assert build_filter({"price[gte]": "10.5"}) == {"price": {"$gte": 10.5}}
    assert build_filter({"price[lt]": "0"}) == {"price": {"$lt": 0.0}}
    assert build_filter({"price[lte]": "-3"}) == {"price": {"$lte": -3.0}}


def test_relational_operators_fall_back_to_strings():
    """Test non-numeric relational operands are kept as raw strings."""
    assert build_filter({"sale_date[gte]": "2024-01-01"}) == {"sale_date": {"$gte": "2024-01-01"}}
    assert build_filter({"name[lt]": "M"}) == {"name": {"$lt": "M"}}
    assert build_filter({"price[gt]": "nan"}) == {"price": {"$gt": "nan"}}


def test_range_on_same_field_is_merged():
    """Test two bounds on one field end up in the same clause."""
    result = build_filter({"price[gte]": "100", "price[lte]": "200"})

    assert result == {"price": {"$gte": 100.0, "$lte": 200.0}}


def test_like_and_ilike():
    """Test pattern matches are case-sensitive and case-insensitive."""
    assert build_filter({"name[like]": "Shirt"}) == {"name": {"$regex": "Shirt"}}
    assert build_filter({"name[ilike]": "shirt"}) == {"name": {"$regex": "shirt", "$options": "i"}}


def test_in_splits_on_commas():
    """Test `in` takes a comma-separated list."""
    result = build_filter({"category[in]": "football,casual"})

    assert result == {"category": {"$in": ["football", "casual"]}}


def test_unknown_operator_is_ignored():
    """Test unsupported operators produce no clause."""
    assert build_filter({"price[between]": "1,2"}) == {}


def test_reserved_and_plain_keys_are_ignored():
    """Test select/order/limit and keys without brackets add nothing."""
    params = {"select": "name", "order": "price.desc", "limit": "2", "color": "Red"}

    assert build_filter(params) == {}


def test_id_targets_primary_key():
    """Test a valid identifier on `id` matches `_id` as an ObjectId."""
    assert build_filter({"id[eq]": VALID_ID}) == {"_id": ObjectId(VALID_ID)}
    assert build_filter({"_id[neq]": VALID_ID}) == {"_id": {"$ne": ObjectId(VALID_ID)}}


def test_reference_field_keeps_its_name():
    """Test `*_id` fields are matched as ObjectIds under their own name."""
    result = build_filter({"product_id[eq]": VALID_ID})

    assert result == {"product_id": ObjectId(VALID_ID)}


def test_invalid_identifier_falls_back_to_string():
    """Test a malformed identifier is matched literally without raising."""
    assert build_filter({"id[eq]": "not-an-id"}) == {"id": "not-an-id"}
    assert build_filter({"product_id[eq]": "123"}) == {"product_id": "123"}


def test_identifier_in_parses_each_element():
    """Test `in` on identifiers parses each element independently."""
    other = "64b7f0c2a1b2c3d4e5f60719"
    result = build_filter({"id[in]": f"{VALID_ID},legacy,{other}"})

    assert result == {"_id": {"$in": [ObjectId(VALID_ID), "legacy", ObjectId(other)]}}


def test_unsupported_operator_on_identifier_adds_nothing():
    """Test only eq/neq/in apply to a parsed identifier."""
    assert build_filter({"id[gt]": VALID_ID}) == {}


def test_parse_sort():
    """Test order parsing and its ascending default."""
    assert parse_sort("price.desc") == ("price", -1)
    assert parse_sort("price.asc") == ("price", 1)
    assert parse_sort("name") == ("name", 1)
    assert parse_sort("id.desc") == ("_id", -1)
    assert parse_sort(None) is None
    assert parse_sort("") is None


def test_parse_limit():
    """Test limit parsing ignores invalid values."""
    assert parse_limit("2") == 2
    assert parse_limit("0") is None
    assert parse_limit("-1") is None
    assert parse_limit("abc") is None
    assert parse_limit(None) is None
