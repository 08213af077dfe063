"""Unit tests for translating collection schemas into Elasticsearch mappings."""

import pytest

from mongosync.mapping_generator import EXCLUDED_FIELDS, generate_index_mapping, index_name, index_property
from mongosync.models import CollectionSchema, ResolvedField, TypeTag


def schema(name, *fields):
    return CollectionSchema(name=name, fields=[ResolvedField(name=n, type=t) for n, t in fields])


class TestIndexProperty:
    def test_string_has_keyword_subfield(self):
        assert index_property(TypeTag.STRING) == {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        }

    @pytest.mark.parametrize("tag,es_type", [
        (TypeTag.NUMBER, "double"),
        (TypeTag.BOOLEAN, "boolean"),
        (TypeTag.DATE, "date"),
        (TypeTag.GEO_POINT, "geo_point"),
    ])
    def test_scalar_types(self, tag, es_type):
        assert index_property(tag) == {"type": es_type}

    def test_unknown_has_no_property(self):
        assert index_property(TypeTag.UNKNOWN) is None

    def test_every_tag_is_covered(self):
        for tag in TypeTag:
            index_property(tag)

    def test_returns_independent_copies(self):
        prop = index_property(TypeTag.STRING)
        prop["fields"]["keyword"]["ignore_above"] = 1
        assert index_property(TypeTag.STRING)["fields"]["keyword"]["ignore_above"] == 256


class TestGenerateIndexMapping:
    def test_reserved_fields_never_mapped(self):
        s = schema("users", ("_id", TypeTag.STRING), ("__v", TypeTag.NUMBER), ("id", TypeTag.STRING),
                   ("name", TypeTag.STRING))
        mapping = generate_index_mapping(s)
        assert set(mapping.properties) == {"name"}
        assert not EXCLUDED_FIELDS & set(mapping.properties)

    def test_unknown_fields_omitted(self):
        s = schema("orders", ("ref", TypeTag.UNKNOWN), ("total", TypeTag.NUMBER))
        assert generate_index_mapping(s).properties == {"total": {"type": "double"}}

    def test_index_name_unchanged_without_singularize(self):
        assert generate_index_mapping(schema("users")).index == "users"

    def test_index_name_singularized(self):
        assert generate_index_mapping(schema("users"), singularize=True).index == "user"

    def test_singularizer_is_pluggable(self):
        seen = []

        def singularizer(word):
            seen.append(word)
            return word

        mapping = generate_index_mapping(schema("data"), singularize=True, singularizer=singularizer)
        assert mapping.index == "data"
        assert seen == ["data"]

    def test_singularizer_not_called_when_disabled(self):
        def singularizer(word):
            raise AssertionError("should not be called")

        assert index_name("people", False, singularizer) == "people"

    def test_array_field_maps_like_element(self):
        s = CollectionSchema(name="posts", fields=[ResolvedField(name="tags", type=TypeTag.STRING, is_array=True)])
        assert generate_index_mapping(s).properties["tags"]["type"] == "text"
