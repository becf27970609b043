"""Tests for the Bitwarden helpers and node."""
import pytest

from conftest import make_response, request_kwargs
from node_sdk import NodeApiError, NodeOperationError
from nodepacks.saas.bitwarden import BitwardenNode
from nodepacks.saas.bitwarden.generic import (
    bitwarden_api_request,
    get_access_token,
    get_base_url,
    get_token_url,
    handle_get_all,
)


CLOUD_CREDENTIALS = {
    "bitwardenApi": {
        "clientId": "organization.abc",
        "clientSecret": "s3cret",
        "environment": "cloudHosted",
    }
}

SELF_HOSTED_CREDENTIALS = {
    "bitwardenApi": {
        "clientId": "organization.abc",
        "clientSecret": "s3cret",
        "environment": "selfHosted",
        "domain": "https://vault.example.com/",
    }
}

TOKEN_RESPONSE = {"access_token": "bw-token", "expires_in": 3600, "token_type": "Bearer"}


def with_token(*responses):
    """Token exchange followed by the given API responses."""
    return [make_response(TOKEN_RESPONSE, method="POST"), *responses]


class TestUrls:
    """Test environment-dependent URLs."""

    def test_cloud_hosted(self, make_node):
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        assert get_token_url(node) == "https://identity.bitwarden.com/connect/token"
        assert get_base_url(node) == "https://api.bitwarden.com"

    def test_self_hosted(self, make_node):
        node = make_node(BitwardenNode, {}, SELF_HOSTED_CREDENTIALS)

        assert get_token_url(node) == "https://vault.example.com/identity/connect/token"
        assert get_base_url(node) == "https://vault.example.com/api"


class TestAccessToken:
    """Test the client-credentials exchange."""

    def test_posts_form_and_returns_token(self, make_node, mock_request):
        mock_request.return_value = make_response(TOKEN_RESPONSE)
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        assert get_access_token(node) == "bw-token"

        kwargs = request_kwargs(mock_request)
        assert kwargs["method"] == "POST"
        assert kwargs["data"]["grant_type"] == "client_credentials"
        assert kwargs["data"]["scope"] == "api.organization"
        assert kwargs["data"]["client_id"] == "organization.abc"
        assert kwargs["data"]["deviceType"] == 2
        assert kwargs["json"] is None

    def test_rejected_client(self, make_node, mock_request):
        mock_request.return_value = make_response({"error": "invalid_client"}, status_code=400)
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        with pytest.raises(NodeApiError, match="Bitwarden token request failed") as exc_info:
            get_access_token(node)
        assert exc_info.value.status_code == 400

    def test_response_without_token(self, make_node, mock_request):
        mock_request.return_value = make_response({"token_type": "Bearer"})
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        with pytest.raises(NodeApiError, match="did not contain an access token"):
            get_access_token(node)


class TestApiRequest:
    """Test the authenticated request helper."""

    def test_headers_and_empty_body(self, make_node, mock_request):
        mock_request.return_value = make_response({"object": "list", "data": []})
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        bitwarden_api_request(node, "GET", "/public/collections", {}, {}, "bw-token")

        kwargs = request_kwargs(mock_request)
        assert kwargs["url"] == "https://api.bitwarden.com/public/collections"
        assert kwargs["headers"]["Authorization"] == "Bearer bw-token"
        assert kwargs["headers"]["user-agent"] == "saas-nodepack"
        assert kwargs["params"] is None
        assert kwargs["json"] is None

    def test_not_found(self, make_node, mock_request):
        mock_request.return_value = make_response(None, status_code=404)
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        with pytest.raises(NodeApiError) as exc_info:
            bitwarden_api_request(node, "GET", "/public/groups/x", {}, {}, "t")

        assert exc_info.value.message == "Bitwarden error response [404]: Not found"

    def test_vendor_message(self, make_node, mock_request):
        mock_request.return_value = make_response(
            {"Message": "The request's model state is invalid."}, status_code=400
        )
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        with pytest.raises(NodeApiError) as exc_info:
            bitwarden_api_request(node, "POST", "/public/groups", {}, {"name": ""}, "t")

        assert exc_info.value.message == (
            "Bitwarden error response [400]: The request's model state is invalid."
        )

    def test_other_errors_are_rethrown(self, make_node, mock_request):
        mock_request.return_value = make_response({"error": "boom"}, status_code=500)
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        with pytest.raises(NodeApiError) as exc_info:
            bitwarden_api_request(node, "GET", "/public/groups", {}, {}, "t")

        assert exc_info.value.status_code == 500
        assert exc_info.value.response_body == {"error": "boom"}


class TestHandleGetAll:
    """Test returnAll/limit handling."""

    DATA = {"object": "list", "data": [{"id": str(i)} for i in range(15)]}

    def test_limit_defaults_to_ten(self, make_node, mock_request):
        mock_request.return_value = make_response(self.DATA)
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        result = handle_get_all(node, 0, "GET", "/public/members", {}, {}, "t")

        assert len(result) == 10

    def test_explicit_limit(self, make_node, mock_request):
        mock_request.return_value = make_response(self.DATA)
        node = make_node(BitwardenNode, {"limit": 3}, CLOUD_CREDENTIALS)

        result = handle_get_all(node, 0, "GET", "/public/members", {}, {}, "t")

        assert [r["id"] for r in result] == ["0", "1", "2"]

    def test_return_all(self, make_node, mock_request):
        mock_request.return_value = make_response(self.DATA)
        node = make_node(BitwardenNode, {"returnAll": True, "limit": 3}, CLOUD_CREDENTIALS)

        result = handle_get_all(node, 0, "GET", "/public/members", {}, {}, "t")

        assert len(result) == 15


class TestBitwardenNode:
    """Test resource/operation dispatch."""

    def test_token_fetched_once_per_execution(self, make_node, mock_request):
        mock_request.side_effect = with_token(
            make_response({"id": "c1"}),
            make_response({"id": "c1"}),
        )
        node = make_node(
            BitwardenNode,
            {"resource": "collection", "operation": "get", "collectionId": "c1"},
            CLOUD_CREDENTIALS,
            input_data=[{"json": {}}, {"json": {}}],
        )

        result = node.execute()

        assert result == [[
            {"json": {"id": "c1"}, "pairedItem": {"item": 0}},
            {"json": {"id": "c1"}, "pairedItem": {"item": 1}},
        ]]
        assert mock_request.call_count == 3
        assert request_kwargs(mock_request, 0)["url"].endswith("/connect/token")

    def test_collection_get_all(self, make_node, mock_request):
        mock_request.side_effect = with_token(
            make_response({"data": [{"id": "c1"}, {"id": "c2"}]}),
        )
        node = make_node(
            BitwardenNode,
            {"resource": "collection", "operation": "getAll", "returnAll": True},
            CLOUD_CREDENTIALS,
        )

        items = node.execute()[0]

        assert [item["json"]["id"] for item in items] == ["c1", "c2"]

    def test_collection_update_requires_fields(self, make_node, mock_request):
        mock_request.side_effect = with_token()
        node = make_node(
            BitwardenNode,
            {"resource": "collection", "operation": "update", "collectionId": "c1"},
            CLOUD_CREDENTIALS,
        )

        with pytest.raises(NodeOperationError, match="at least one field"):
            node.execute()

    def test_collection_update_groups(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"id": "c1"}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "collection",
                "operation": "update",
                "collectionId": "c1",
                "updateFields": {"groups": ["g1", "g2"], "externalId": "ext"},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        kwargs = request_kwargs(mock_request)
        assert kwargs["method"] == "PUT"
        assert kwargs["url"].endswith("/public/collections/c1")
        assert kwargs["json"] == {
            "groups": [{"id": "g1", "ReadOnly": False}, {"id": "g2", "ReadOnly": False}],
            "externalId": "ext",
        }

    def test_delete_reports_success(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(None))
        node = make_node(
            BitwardenNode,
            {"resource": "member", "operation": "delete", "memberId": "m1"},
            CLOUD_CREDENTIALS,
        )

        assert node.execute()[0][0]["json"] == {"success": True}
        assert request_kwargs(mock_request)["method"] == "DELETE"

    def test_event_filters_become_query(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"data": []}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "event",
                "operation": "getAll",
                "filters": {"actingUserId": "u1", "start": "2024-01-01T00:00:00Z", "itemID": ""},
            },
            CLOUD_CREDENTIALS,
        )

        assert node.execute() == [[]]
        assert request_kwargs(mock_request)["params"] == {
            "actingUserId": "u1",
            "start": "2024-01-01T00:00:00Z",
        }

    def test_group_create(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"id": "g1", "name": "Ops"}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "group",
                "operation": "create",
                "name": "Ops",
                "accessAll": False,
                "additionalFields": {"collections": ["c1"]},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert request_kwargs(mock_request)["json"] == {
            "name": "Ops",
            "AccessAll": False,
            "collections": [{"id": "c1", "ReadOnly": False}],
        }

    def test_group_update_fills_missing_required_fields(self, make_node, mock_request):
        mock_request.side_effect = with_token(
            make_response({"id": "g1", "name": "Ops", "accessAll": True}),
            make_response({"id": "g1", "name": "Ops", "accessAll": True, "externalId": "x"}),
        )
        node = make_node(
            BitwardenNode,
            {
                "resource": "group",
                "operation": "update",
                "groupId": "g1",
                "updateFields": {"externalId": "x"},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert request_kwargs(mock_request, 1)["method"] == "GET"
        assert request_kwargs(mock_request)["json"] == {
            "name": "Ops",
            "AccessAll": True,
            "externalId": "x",
        }

    def test_group_get_members(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(["m1", "m2"]))
        node = make_node(
            BitwardenNode,
            {"resource": "group", "operation": "getMembers", "groupId": "g1"},
            CLOUD_CREDENTIALS,
        )

        items = node.execute()[0]

        assert [item["json"] for item in items] == [{"memberId": "m1"}, {"memberId": "m2"}]

    def test_group_update_members(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(None))
        node = make_node(
            BitwardenNode,
            {
                "resource": "group",
                "operation": "updateMembers",
                "groupId": "g1",
                "memberIds": "m1, m2,,m3",
            },
            CLOUD_CREDENTIALS,
        )

        assert node.execute()[0][0]["json"] == {"success": True}
        assert request_kwargs(mock_request)["json"] == {"memberIds": ["m1", "m2", "m3"]}
        assert request_kwargs(mock_request)["url"].endswith("/public/groups/g1/member-ids")

    def test_member_create(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"id": "m1"}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "member",
                "operation": "create",
                "type": 3,
                "email": "ops@example.com",
                "accessAll": True,
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert request_kwargs(mock_request)["json"] == {
            "type": 3,
            "email": "ops@example.com",
            "AccessAll": True,
        }

    def test_member_update_groups(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(None))
        node = make_node(
            BitwardenNode,
            {
                "resource": "member",
                "operation": "updateGroups",
                "memberId": "m1",
                "groupIds": "g1,g2",
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert request_kwargs(mock_request)["json"] == {"groupIds": ["g1", "g2"]}

    def test_member_get_groups(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(["g1"]))
        node = make_node(
            BitwardenNode,
            {"resource": "member", "operation": "getGroups", "memberId": "m1"},
            CLOUD_CREDENTIALS,
        )

        assert node.execute() == [[{"json": {"groupId": "g1"}, "pairedItem": {"item": 0}}]]

    def test_continue_on_fail_emits_error_item(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response(None, status_code=404))
        node = make_node(
            BitwardenNode,
            {"resource": "member", "operation": "get", "memberId": "missing"},
            CLOUD_CREDENTIALS,
        )
        node.continue_on_fail = True

        assert node.execute() == [[{
            "json": {"error": "Bitwarden error response [404]: Not found"},
            "pairedItem": {"item": 0},
        }]]

    def test_unsupported_operation(self, make_node, mock_request):
        mock_request.side_effect = with_token()
        node = make_node(
            BitwardenNode,
            {"resource": "event", "operation": "delete"},
            CLOUD_CREDENTIALS,
        )

        with pytest.raises(NodeOperationError, match="not supported"):
            node.execute()

    def test_load_collections(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"data": [
            {"id": "c1", "name": "Shared"},
            {"id": "c2", "name": None},
        ]}))
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        assert node.load_options("getCollections") == [
            {"name": "Shared", "value": "c1"},
            {"name": "c2", "value": "c2"},
        ]


class TestBitwardenUpdates:
    """Test update operations that merge the current object."""

    def test_member_update_fills_missing_required_fields(self, make_node, mock_request):
        mock_request.side_effect = with_token(
            make_response({"id": "m1", "type": 1, "accessAll": True}),
            make_response({"id": "m1", "type": 1, "accessAll": True, "externalId": "x"}),
        )
        node = make_node(
            BitwardenNode,
            {
                "resource": "member",
                "operation": "update",
                "memberId": "m1",
                "updateFields": {"externalId": "x"},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        current = request_kwargs(mock_request, 1)
        assert current["method"] == "GET"
        assert current["url"].endswith("/public/members/m1")
        update = request_kwargs(mock_request)
        assert update["method"] == "PUT"
        assert update["url"].endswith("/public/members/m1")
        assert update["json"] == {"type": 1, "AccessAll": True, "externalId": "x"}

    def test_member_update_with_all_required_fields_skips_lookup(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"id": "m1"}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "member",
                "operation": "update",
                "memberId": "m1",
                "updateFields": {"type": 2, "accessAll": False, "collections": "c1,c2"},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert mock_request.call_count == 2
        assert request_kwargs(mock_request)["json"] == {
            "type": 2,
            "AccessAll": False,
            "collections": [{"id": "c1", "ReadOnly": False}, {"id": "c2", "ReadOnly": False}],
        }

    @pytest.mark.parametrize("resource,id_parameter", [("member", "memberId"), ("group", "groupId")])
    def test_update_requires_fields(self, make_node, mock_request, resource, id_parameter):
        mock_request.side_effect = with_token()
        node = make_node(
            BitwardenNode,
            {"resource": resource, "operation": "update", id_parameter: "x1", "updateFields": {}},
            CLOUD_CREDENTIALS,
        )

        with pytest.raises(
            NodeOperationError,
            match=f"Please enter at least one field to update for the {resource}.",
        ):
            node.execute()
        assert mock_request.call_count == 1

    def test_collection_update_external_id_only(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"id": "c1"}))
        node = make_node(
            BitwardenNode,
            {
                "resource": "collection",
                "operation": "update",
                "collectionId": "c1",
                "updateFields": {"externalId": "ext"},
            },
            CLOUD_CREDENTIALS,
        )

        node.execute()

        assert request_kwargs(mock_request)["json"] == {"externalId": "ext"}


class TestBitwardenRoutes:
    """Test the endpoint each simple operation calls."""

    @pytest.mark.parametrize(
        "parameters,method,path",
        [
            ({"resource": "collection", "operation": "get", "collectionId": "c1"}, "GET", "/public/collections/c1"),
            ({"resource": "collection", "operation": "delete", "collectionId": "c1"}, "DELETE", "/public/collections/c1"),
            ({"resource": "group", "operation": "get", "groupId": "g1"}, "GET", "/public/groups/g1"),
            ({"resource": "group", "operation": "delete", "groupId": "g1"}, "DELETE", "/public/groups/g1"),
            ({"resource": "member", "operation": "get", "memberId": "m1"}, "GET", "/public/members/m1"),
        ],
    )
    def test_single_object_operations(self, make_node, mock_request, parameters, method, path):
        mock_request.side_effect = with_token(make_response({"id": "x"}))
        node = make_node(BitwardenNode, parameters, CLOUD_CREDENTIALS)

        assert node.execute()[0][0]["json"] == {"id": "x"}

        kwargs = request_kwargs(mock_request)
        assert kwargs["method"] == method
        assert kwargs["url"] == f"https://api.bitwarden.com{path}"

    @pytest.mark.parametrize("resource,path", [("group", "/public/groups"), ("member", "/public/members")])
    def test_get_all_honours_limit(self, make_node, mock_request, resource, path):
        mock_request.side_effect = with_token(
            make_response({"data": [{"id": "a"}, {"id": "b"}, {"id": "c"}]}),
        )
        node = make_node(
            BitwardenNode,
            {"resource": resource, "operation": "getAll", "limit": 2},
            CLOUD_CREDENTIALS,
        )

        items = node.execute()[0]

        assert [item["json"]["id"] for item in items] == ["a", "b"]
        assert request_kwargs(mock_request)["url"].endswith(path)

    def test_load_groups(self, make_node, mock_request):
        mock_request.side_effect = with_token(make_response({"data": [
            {"id": "g1", "name": "Ops"},
            {"id": "g2", "name": ""},
        ]}))
        node = make_node(BitwardenNode, {}, CLOUD_CREDENTIALS)

        assert node.load_options("getGroups") == [
            {"name": "Ops", "value": "g1"},
            {"name": "g2", "value": "g2"},
        ]
        assert request_kwargs(mock_request)["url"] == "https://api.bitwarden.com/public/groups"
