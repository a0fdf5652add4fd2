"""
Tests for the cube metadata models and their validation.
"""

import io
import json
import unittest

from pydantic import ValidationError

from cubefilter.errors import ArgumentError, MalformedMetadata, ModelError, UnknownDimension
from cubefilter.metadata import (
    CubeMetadata,
    DimensionSpec,
    MetadataObject,
    read_metadata,
    validate_metadata,
)
from tests.common import RecordingEngine, create_document


class MockModelObject(MetadataObject):
    """Mock model object for testing"""

    pass


class MetadataObjectTestCase(unittest.TestCase):
    def test_name_validation(self):
        with self.assertRaises(ValueError):
            MockModelObject(name="   ")

    def test_str(self):
        self.assertEqual("region", str(MockModelObject(name="region")))
        self.assertEqual("<MockModelObject>", str(MockModelObject()))

    def test_extra_keys_kept(self):
        obj = MockModelObject(name="region", label="Region")
        self.assertEqual({"name": "region", "label": "Region"}, obj.to_dict())

    def test_frozen(self):
        obj = MockModelObject(name="test")
        with self.assertRaises(ValidationError):
            obj.name = "other"


class DimensionSpecTestCase(unittest.TestCase):
    def test_creation(self):
        dim = DimensionSpec(name="region", hierarchy="[Region]", level=1, members=["east", "west"])
        self.assertEqual(("east", "west"), dim.members)
        self.assertEqual(2, dim.cardinality)
        self.assertTrue(dim.has_member("east"))
        self.assertFalse(dim.has_member("north"))

    def test_invalid_members(self):
        with self.assertRaises(ValidationError):
            DimensionSpec(name="region", hierarchy="[Region]", level=1, members="east")
        with self.assertRaises(ValidationError):
            DimensionSpec(name="region", hierarchy="[Region]", level=1, members=["a", "a"])
        with self.assertRaises(ValidationError):
            DimensionSpec(name="region", hierarchy="[Region]", level=1, members=[1, 2])

    def test_invalid_level(self):
        with self.assertRaises(ValidationError):
            DimensionSpec(name="region", hierarchy="[Region]", level=-1, members=[])
        with self.assertRaises(ValidationError):
            DimensionSpec(name="region", hierarchy="[Region]", level="top", members=[])

    def test_members_in_range(self):
        dim = DimensionSpec(name="year", hierarchy="[Year]", level=0,
                            members=["2010", "2011", "2012", "2013"])
        self.assertEqual(["2011", "2012"], dim.members_in_range("2011", "2013"))
        self.assertEqual([], dim.members_in_range("2020", "2030"))

        with self.assertRaises(ArgumentError):
            dim.members_in_range(2011, 2013)


class CubeMetadataTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = RecordingEngine()

    def test_valid_document(self):
        result = validate_metadata(create_document(self.engine))
        self.assertTrue(result.ok)
        self.assertEqual([], result.errors)

        metadata = result.unwrap()
        self.assertIs(self.engine, metadata.api)
        self.assertEqual("retail", metadata.schema_name)
        self.assertEqual("sales", metadata.cube)
        self.assertEqual("revenue", metadata.default_measure)
        self.assertEqual(["region", "product"], metadata.dimension_names)
        self.assertEqual("region", metadata.dimension("region").name)
        self.assertEqual(6, metadata.size())
        self.assertEqual("retail.sales", str(metadata))

    def test_unknown_dimension(self):
        metadata = validate_metadata(create_document(self.engine)).unwrap()
        with self.assertRaises(UnknownDimension) as cm:
            metadata.dimension("country")
        self.assertEqual("country", cm.exception.dimension)

    def test_already_validated(self):
        metadata = validate_metadata(create_document(self.engine)).unwrap()
        self.assertIs(metadata, validate_metadata(metadata).unwrap())

    def test_to_dict_omits_engine(self):
        metadata = validate_metadata(create_document(self.engine)).unwrap()
        document = metadata.to_dict()
        self.assertNotIn("api", document)
        self.assertEqual("retail", document["schema"])
        self.assertEqual(["east", "west"], list(document["dimensions"]["region"]["members"]))

    def test_not_a_mapping(self):
        result = validate_metadata(["not", "a", "document"])
        self.assertFalse(result.ok)
        self.assertEqual(["<document>"], [field for field, _ in result.errors])

    def assertMalformed(self, document, field):
        result = validate_metadata(document)
        self.assertFalse(result.ok)
        fields = [name for name, _ in result.errors]
        self.assertIn(field, fields)

        with self.assertRaises(MalformedMetadata) as cm:
            result.unwrap()
        self.assertIn(field, cm.exception.fields)

    def test_missing_api(self):
        document = create_document(self.engine)
        del document["api"]
        self.assertMalformed(document, "api")

    def test_api_without_contract(self):
        self.assertMalformed(create_document("http://olap.example.com"), "api")
        self.assertMalformed(create_document(object()), "api")

    def test_wrong_field_types(self):
        self.assertMalformed(create_document(self.engine, schema=12), "schema")
        self.assertMalformed(create_document(self.engine, cube=None), "cube")
        self.assertMalformed(create_document(self.engine, measures="revenue"), "measures")
        self.assertMalformed(create_document(self.engine, dimensions=["region"]), "dimensions")

    def test_empty_collections(self):
        self.assertMalformed(create_document(self.engine, measures=[]), "measures")
        self.assertMalformed(create_document(self.engine, dimensions={}), "dimensions")

    def test_duplicate_measures(self):
        self.assertMalformed(
            create_document(self.engine, measures=["revenue", "revenue"]), "measures"
        )

    def test_malformed_dimension(self):
        dimensions = {
            "region": {"hierarchy": "[Region]", "level": 1, "members": "east"},
        }
        self.assertMalformed(
            create_document(self.engine, dimensions=dimensions),
            "dimensions.region.members",
        )

        dimensions = {"region": {"level": 1, "members": ["east"]}}
        self.assertMalformed(
            create_document(self.engine, dimensions=dimensions),
            "dimensions.region.hierarchy",
        )

    def test_reserved_dimension_name(self):
        dimensions = {"_all": {"hierarchy": "[All]", "level": 0, "members": ["x"]}}
        self.assertMalformed(create_document(self.engine, dimensions=dimensions), "dimensions")

    def test_metadata_is_immutable(self):
        metadata = validate_metadata(create_document(self.engine)).unwrap()
        with self.assertRaises(ValidationError):
            metadata.cube = "other"


class ReadMetadataTestCase(unittest.TestCase):
    def test_read_from_stream(self):
        stream = io.StringIO(json.dumps({"schema": "retail", "cube": "sales"}))
        document = read_metadata(stream)
        self.assertEqual("sales", document["cube"])

    def test_read_errors(self):
        with self.assertRaises(ArgumentError):
            read_metadata("/nonexistent/metadata.json")
        with self.assertRaises(ModelError):
            read_metadata(io.StringIO("[1, 2, 3]"))
        with self.assertRaises(ModelError):
            read_metadata(io.StringIO("{not json"))


if __name__ == "__main__":
    unittest.main()
