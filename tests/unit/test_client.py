"""Test ServiceClient invocation, retries and error mapping."""

import httpx
import pytest

from cloudwire.client.factory import create_client
from cloudwire.core.config import Settings
from cloudwire.core.enums import ErrorCategory
from cloudwire.core.errors import (
    ClientInputError,
    EndpointConnectionError,
    NoCredentialsError,
    ParamValidationError,
    ResourceNotFoundError,
    ServerSideError,
    ThrottlingError,
    UnknownOperationError,
)

DOCUMENT = {
    "Document": {
        "Name": "AWS-RunShellScript",
        "Sha1": "da39a3ee",
        "Status": "Active",
        "CreatedDate": 1429093800,
    }
}


class TestInvoke:
    def test_snake_case_method(self, make_client, recorder, json_response):
        handler = recorder(json_response(DOCUMENT))
        client = make_client("ssm", handler)

        response = client.describe_document(name="AWS-RunShellScript")

        assert response.document.name == "AWS-RunShellScript"
        assert response.document.status == "Active"
        assert response.document.created_date.year == 2015
        assert handler.last_target == "AmazonSSM.DescribeDocument"
        assert handler.last_json == {"Name": "AWS-RunShellScript"}

    def test_invoke_by_wire_name(self, make_client, recorder, json_response):
        handler = recorder(json_response({"Name": "doc", "Content": "{}"}))
        client = make_client("ssm", handler)

        response = client.invoke("GetDocument", Name="doc")

        assert response.name == "doc"
        assert response.content == "{}"
        assert handler.last_json == {"Name": "doc"}

    def test_request_instance(self, make_client, recorder, json_response):
        handler = recorder(json_response({}))
        client = make_client("ssm", handler)
        request = client.request_class("CreateDocument")(name="doc", content="{}")

        client.create_document(request)

        assert handler.last_json == {"Content": "{}", "Name": "doc"}

    def test_endpoint_and_signature(self, make_client, recorder, json_response):
        handler = recorder(json_response({}))
        client = make_client("ssm", handler)

        client.delete_document(name="doc")

        request = handler.requests[-1]
        assert request.url.host == "ssm.us-east-1.amazonaws.com"
        auth = request.headers["Authorization"]
        assert auth.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
        assert "/us-east-1/ssm/aws4_request" in auth
        assert "x-amz-target" in auth
        assert request.headers["Content-Type"] == "application/x-amz-json-1.1"

    def test_response_metadata(self, make_client, recorder, json_response):
        handler = recorder(json_response({}, request_id="req-42"))
        client = make_client("ssm", handler)

        response = client.delete_document(name="doc")

        meta = response.response_metadata
        assert meta.request_id == "req-42"
        assert meta.http_status_code == 200
        assert meta.retry_attempts == 0
        assert meta.http_headers["x-amzn-requestid"] == "req-42"

    def test_missing_required_member(self, make_client, recorder, json_response):
        handler = recorder(json_response({}))
        client = make_client("ssm", handler)

        with pytest.raises(ParamValidationError, match="CreateDocument"):
            client.create_document(name="doc")
        assert handler.requests == []

    def test_unknown_operation(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})))
        with pytest.raises(UnknownOperationError):
            client.invoke("LaunchRocket")
        with pytest.raises(AttributeError, match="launch_rocket"):
            client.launch_rocket

    def test_no_credentials(self, recorder, json_response):
        handler = recorder(json_response({}))
        client = create_client(
            "ssm", settings=Settings(), transport=httpx.MockTransport(handler)
        )
        with pytest.raises(NoCredentialsError):
            client.delete_document(name="doc")
        assert handler.requests == []


class TestErrors:
    def test_modeled_error(self, make_client, recorder, json_response):
        handler = recorder(json_response(
            {"__type": "InvalidDocument", "message": "Document bogus not found"},
            status_code=404,
            request_id="req-404",
        ))
        client = make_client("ssm", handler)

        with pytest.raises(client.exceptions.InvalidDocument) as exc_info:
            client.describe_document(name="bogus")

        error = exc_info.value
        assert isinstance(error, ResourceNotFoundError)
        assert isinstance(error, client.exceptions.base)
        assert error.category is ErrorCategory.NOT_FOUND
        assert error.error_code == "InvalidDocument"
        assert error.request_id == "req-404"
        assert error.operation_name == "DescribeDocument"
        assert error.message == "Document bogus not found"
        assert len(handler.requests) == 1

    def test_unmodeled_error(self, make_client, recorder, json_response):
        handler = recorder(json_response({"__type": "SomethingOdd"}, status_code=400))
        client = make_client("ssm", handler)

        with pytest.raises(ClientInputError) as exc_info:
            client.list_documents()

        assert isinstance(exc_info.value, client.exceptions.base)
        assert type(exc_info.value).__name__ == "SimpleSystemsManagementClientInputError"

    def test_unknown_error_class_attribute(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})))
        with pytest.raises(AttributeError, match="NoSuchThing"):
            client.exceptions.NoSuchThing


class TestRetry:
    def test_server_error_then_success(self, make_client, recorder, json_response):
        handler = recorder(
            json_response({"__type": "InternalServerError", "Message": "boom"}, status_code=500),
            json_response({"DocumentIdentifiers": []}),
        )
        client = make_client("ssm", handler)

        response = client.list_documents()

        assert response.document_identifiers == []
        assert response.response_metadata.retry_attempts == 1
        assert len(handler.requests) == 2

    def test_gives_up_after_max_attempts(self, make_client, recorder, json_response):
        handler = recorder(
            json_response({"__type": "InternalServerError"}, status_code=500),
        )
        client = make_client("ssm", handler)

        with pytest.raises(ServerSideError):
            client.list_documents()
        assert len(handler.requests) == 3

    def test_throttling_retried(self, make_client, recorder, json_response):
        handler = recorder(
            json_response({"__type": "TooManyUpdates"}, status_code=429),
            json_response({}),
        )
        client = make_client("ssm", handler)

        client.delete_association(name="doc", instance_id="i-1")

        assert len(handler.requests) == 2

    def test_quota_error_not_retried(self, make_client, recorder, json_response):
        handler = recorder(json_response({"__type": "AssociationLimitExceeded"}, status_code=400))
        client = make_client("ssm", handler)

        with pytest.raises(ThrottlingError):
            client.create_association(name="doc", instance_id="i-1")
        assert len(handler.requests) == 1

    def test_client_error_not_retried(self, make_client, recorder, json_response):
        handler = recorder(json_response({"__type": "InvalidDocumentContent"}, status_code=400))
        client = make_client("ssm", handler)

        with pytest.raises(client.exceptions.InvalidDocumentContent):
            client.create_document(name="doc", content="not json")
        assert len(handler.requests) == 1

    def test_connection_error_retried(self, make_client, json_response):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection reset", request=request)
            return json_response({})

        client = make_client("ssm", handler)
        response = client.delete_document(name="doc")

        assert response.response_metadata.retry_attempts == 1
        assert len(calls) == 2

    def test_connection_error_exhausted(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client("ssm", handler)
        with pytest.raises(EndpointConnectionError):
            client.delete_document(name="doc")


class TestAsync:
    @pytest.mark.asyncio
    async def test_async_method(self, make_client, recorder, json_response):
        handler = recorder(json_response(DOCUMENT))
        client = make_client("ssm", handler)

        async with client:
            response = await client.adescribe_document(name="AWS-RunShellScript")

        assert response.document.sha1 == "da39a3ee"
        assert handler.last_target == "AmazonSSM.DescribeDocument"

    @pytest.mark.asyncio
    async def test_async_retry(self, make_client, recorder, json_response):
        handler = recorder(
            json_response({"__type": "InternalServerError"}, status_code=500),
            json_response({}),
        )
        client = make_client("ssm", handler)

        response = await client.ainvoke("DeleteDocument", name="doc")

        assert response.response_metadata.retry_attempts == 1

    @pytest.mark.asyncio
    async def test_async_modeled_error(self, make_client, recorder, json_response):
        handler = recorder(json_response({"__type": "AssociationDoesNotExist"}, status_code=404))
        client = make_client("ssm", handler)

        with pytest.raises(client.exceptions.AssociationDoesNotExist):
            await client.adescribe_association(name="doc", instance_id="i-1")


class TestIntrospection:
    def test_dir_lists_operations(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})))
        names = dir(client)
        assert "list_documents" in names
        assert "alist_documents" in names
        assert "invoke" in names

    def test_bound_method_metadata(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})))
        assert client.create_document.__name__ == "create_document"
        assert client.acreate_document.__name__ == "acreate_document"
        assert client.create_document.__doc__ == "Creates a configuration document."

    def test_classes(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})))
        assert client.request_class("GetDocument").__name__ == "GetDocumentRequest"
        assert client.response_class("get_document").__name__ == "GetDocumentResponse"
        assert client.can_paginate("ListDocuments")
        assert not client.can_paginate("GetDocument")

    def test_repr(self, make_client, recorder, json_response):
        client = make_client("ssm", recorder(json_response({})), region="eu-west-1")
        assert repr(client) == (
            "ServiceClient('ssm', region='eu-west-1', "
            "endpoint_url='https://ssm.eu-west-1.amazonaws.com')"
        )

    def test_context_manager_closes_transport(self, make_client, recorder, json_response):
        with make_client("ssm", recorder(json_response({}))) as client:
            client.delete_document(name="doc")
            assert client._transport._client is not None
        assert client._transport._client is None
