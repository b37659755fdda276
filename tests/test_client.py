"""Tests for the EuPathDB HTTP client."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests
import responses
from responses import matchers

from eupathdb.clients.base import BaseApiClient
from eupathdb.clients.eupathdb import EuPathDBClient, empty_response, truncate_url
from eupathdb.common.exceptions import ApiClientError, TimeoutError, UnknownProviderError, UnsupportedFormatError
from eupathdb.config import HTTPSettings

from tests.conftest import make_response

TRITRYP_URL = "http://tritrypdb.org/webservices/GeneQuestions/GenesByTaxon.json"


class TestBuildQueryUrl:
    def test_organism_is_fully_percent_encoded(self, client: EuPathDBClient) -> None:
        url = client.build_query_url("TriTrypDB", "Leishmania major strain Friedlin")

        assert url == f"{TRITRYP_URL}?organism=Leishmania%20major%20strain%20Friedlin"

    def test_reserved_characters_are_encoded(self, client: EuPathDBClient) -> None:
        url = client.build_query_url("PlasmoDB", "Plasmodium falciparum 3D7/a&b")

        assert "organism=Plasmodium%20falciparum%203D7%2Fa%26b" in url

    def test_extra_params_keep_order_and_skip_organism(self, client: EuPathDBClient) -> None:
        url = client.build_query_url(
            "TriTrypDB",
            "L major",
            {"o-tables": "GoTerms", "organism": "other", "o-fields": "primary_key"},
            "GeneQuestions/GenesByTaxonGene",
        )

        assert url == (
            "http://tritrypdb.org/webservices/GeneQuestions/GenesByTaxonGene.json"
            "?organism=L%20major&o-tables=GoTerms&o-fields=primary_key"
        )

    def test_custom_base_url_template(self) -> None:
        client = EuPathDBClient(HTTPSettings(base_url_template="https://{provider}.example.org/"), session=requests.Session())

        assert client.base_url("FungiDB") == "https://fungidb.example.org"

    def test_empty_organism_rejected(self, client: EuPathDBClient) -> None:
        with pytest.raises(ValueError):
            client.build_query_url("TriTrypDB", "")


def test_truncate_url() -> None:
    short = "http://tritrypdb.org/webservices/x.json"
    long = "http://tritrypdb.org/" + "a" * 300

    assert truncate_url(short) == short
    assert truncate_url(long) == long[:160] + "..."
    assert truncate_url("x" * 200) == "x" * 200


class TestQuery:
    @responses.activate
    def test_returns_parsed_json(self, client: EuPathDBClient) -> None:
        payload = make_response([{"id": "LmjF.01.0010/TriTrypDB", "fields": [], "tables": []}])
        responses.add(
            responses.GET,
            TRITRYP_URL,
            json=payload,
            status=200,
            match=[matchers.query_param_matcher({"organism": "Leishmania major", "o-tables": "GoTerms"})],
        )

        result = client.query("TriTrypDB", "Leishmania major", {"o-tables": "GoTerms"})

        assert result == payload
        assert len(responses.calls) == 1

    @responses.activate
    def test_unreachable_host_returns_empty_response(self, client: EuPathDBClient) -> None:
        # responses refuses unregistered URLs with a ConnectionError
        result = client.fetch("unknownDB", "x", timeout_seconds=1)

        assert result.payload == empty_response()
        assert result.degraded
        assert result.error.startswith("ConnectionError")
        assert client.query("unknownDB", "x", timeout_seconds=1) == empty_response()

    @responses.activate
    def test_timeout_returns_empty_response(self, client: EuPathDBClient) -> None:
        responses.add(responses.GET, TRITRYP_URL, body=requests.exceptions.ReadTimeout("timed out"))

        result = client.fetch("TriTrypDB", "Leishmania major")

        assert result.payload == empty_response()
        assert "ReadTimeout" in result.error

    @responses.activate
    def test_non_json_format_rejected_before_any_request(self, client: EuPathDBClient) -> None:
        with pytest.raises(UnsupportedFormatError) as excinfo:
            client.query("TriTrypDB", "Leishmania major", response_format="xml")

        assert "Invalid response type specified" in str(excinfo.value)
        assert len(responses.calls) == 0

    @responses.activate
    def test_error_status_raises(self, client: EuPathDBClient) -> None:
        responses.add(responses.GET, TRITRYP_URL, status=500, body="boom")

        with pytest.raises(ApiClientError) as excinfo:
            client.query("TriTrypDB", "Leishmania major")

        assert excinfo.value.status_code == 500

    @responses.activate
    def test_invalid_json_raises(self, client: EuPathDBClient) -> None:
        responses.add(responses.GET, TRITRYP_URL, status=200, body="<html>maintenance</html>")

        with pytest.raises(ApiClientError, match="not valid JSON"):
            client.query("TriTrypDB", "Leishmania major")

    def test_default_timeout_is_600_seconds(self) -> None:
        session = Mock()
        session.request.return_value.json.return_value = empty_response()
        client = EuPathDBClient(session=session)

        client.query("TriTrypDB", "Leishmania major")

        _, kwargs = session.request.call_args
        assert kwargs["timeout"] == 600
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_explicit_timeout_overrides_default(self) -> None:
        session = Mock()
        session.request.return_value.json.return_value = empty_response()
        client = EuPathDBClient(session=session)

        client.query("TriTrypDB", "Leishmania major", timeout_seconds=30)

        assert session.request.call_args.kwargs["timeout"] == 30


class TestPost:
    def test_posts_body_to_answer_service(self) -> None:
        session = Mock()
        session.request.return_value.json.return_value = {"records": []}
        client = EuPathDBClient(session=session)
        body = {"searchConfig": {"parameters": {}}, "reportConfig": {"attributes": ["primary_key"]}}

        result = client.post("MicrosporidiaDB", body)

        assert result == {"records": []}
        args, kwargs = session.request.call_args
        assert args == ("POST", "http://microsporidiadb.org/micro/service/answer")
        assert kwargs["json"] == body
        assert kwargs["timeout"] == 10

    def test_unknown_provider_raises_before_request(self) -> None:
        session = Mock()
        client = EuPathDBClient(session=session)

        with pytest.raises(UnknownProviderError):
            client.post("unknownDB", {})

        session.request.assert_not_called()

    @responses.activate
    def test_timeout_raises_timeout_error(self, client: EuPathDBClient) -> None:
        responses.add(
            responses.POST,
            "http://tritrypdb.org/tritrypdb/service/answer",
            body=requests.exceptions.ConnectTimeout("slow"),
        )

        with pytest.raises(TimeoutError) as excinfo:
            client.post("TriTrypDB", {})

        assert excinfo.value.timeout == 10

    @responses.activate
    def test_transport_failure_raises(self, client: EuPathDBClient) -> None:
        with pytest.raises(ApiClientError):
            client.post("TriTrypDB", {})

    @responses.activate
    def test_returns_decoded_body(self, client: EuPathDBClient) -> None:
        responses.add(
            responses.POST,
            "http://tritrypdb.org/tritrypdb/service/answer",
            json={"records": [{"id": "x"}]},
            match=[matchers.json_params_matcher({"q": 1})],
        )

        assert client.post("TriTrypDB", {"q": 1}) == {"records": [{"id": "x"}]}


def test_client_closes_only_its_own_session() -> None:
    session = Mock()
    with EuPathDBClient(session=session):
        pass
    session.close.assert_called_once()

    shared = EuPathDBClient()
    shared.close()
    assert shared.session is BaseApiClient.shared_session()


def test_shared_session_is_reused_and_never_retries() -> None:
    first, second = EuPathDBClient(), EuPathDBClient()

    assert first.session is second.session
    assert first.session.get_adapter("http://tritrypdb.org").max_retries.total == 0

    BaseApiClient.reset_shared_session()
    assert EuPathDBClient().session is not first.session
