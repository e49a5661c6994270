"""Test wire-name to python-name conversion."""

import pytest

from cloudwire.model.naming import xform_name
from cloudwire.model.types import field_name


class TestXformName:
    @pytest.mark.parametrize(
        "wire, expected",
        [
            ("DescribeVpcs", "describe_vpcs"),
            ("CreateAssociationBatch", "create_association_batch"),
            ("MLModelId", "ml_model_id"),
            ("GetMLModel", "get_ml_model"),
            ("EndpointUrl", "endpoint_url"),
            ("VpcIds", "vpc_ids"),
            ("predictedLabel", "predicted_label"),
            ("Sha1", "sha1"),
            ("InputDataLocationS3", "input_data_location_s3"),
            ("DescribeAccountAttributes", "describe_account_attributes"),
        ],
    )
    def test_camel_case(self, wire, expected):
        assert xform_name(wire) == expected

    def test_snake_case_is_unchanged(self):
        assert xform_name("describe_vpcs") == "describe_vpcs"
        assert xform_name(xform_name("MLModelId")) == "ml_model_id"

    def test_single_word(self):
        assert xform_name("Name") == "name"
        assert xform_name("key") == "key"


class TestFieldName:
    def test_plain_member(self):
        assert field_name("InstanceId") == "instance_id"

    def test_basemodel_attribute_gets_suffix(self):
        # "Schema" would shadow BaseModel.schema
        assert field_name("Schema") == "schema_"

    def test_keyword_gets_suffix(self):
        assert field_name("Global") == "global_"
