from unittest import mock

import requests

from api_client import DashboardClient


def fake_response(status_code=200, json_data=None, content=b"", content_type="application/json"):
    response = mock.Mock()
    response.status_code = status_code
    response.headers = {"Content-Type": content_type}
    response.content = content
    response.text = "" if json_data is None else str(json_data)
    if json_data is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_data
    return response


def make_client():
    return DashboardClient("operator", "secret", base_url="http://testserver/api/")


def test_upload_posts_the_file_with_basic_auth(tmp_path):
    csv_path = tmp_path / "plant.csv"
    csv_path.write_text("timestamp,equipment_id\n2024,EQ-1\n")
    client = make_client()

    with mock.patch.object(
        client.session, "request", return_value=fake_response(json_data={"summary": {"id": "1"}})
    ) as request:
        result = client.upload_csv(str(csv_path))

    assert result.ok
    assert result.payload == {"summary": {"id": "1"}}
    assert client.session.auth == ("operator", "secret")
    method, url = request.call_args.args
    assert (method, url) == ("POST", "http://testserver/api/upload-equipment/")
    assert request.call_args.kwargs["files"]["file"][0] == "plant.csv"


def test_missing_local_file_is_reported():
    result = make_client().upload_csv("/definitely/not/here.csv")

    assert not result.ok
    assert result.error_message


def test_server_error_message_is_passed_through():
    client = make_client()
    body = {"error": "Error parsing CSV. Please check format."}

    with mock.patch.object(client.session, "request", return_value=fake_response(400, body)):
        result = client.load_sample()

    assert not result.ok
    assert result.error_message == "Error parsing CSV. Please check format."


def test_network_failure_becomes_a_result():
    client = make_client()

    with mock.patch.object(
        client.session, "request", side_effect=requests.ConnectionError("refused")
    ):
        result = client.history()

    assert not result.ok
    assert "refused" in result.error_message


def test_enrich_sends_summary_id_and_generation():
    client = make_client()

    with mock.patch.object(
        client.session, "request", return_value=fake_response(json_data={"enriched": True})
    ) as request:
        client.enrich("123", 4)

    assert request.call_args.kwargs["json"] == {"summary_id": "123", "generation": 4}


def test_clear_session_accepts_no_content():
    client = make_client()

    with mock.patch.object(client.session, "request", return_value=fake_response(204)):
        result = client.clear_session()

    assert result.ok
    assert result.payload is None


def test_report_is_written_to_disk(tmp_path):
    client = make_client()
    destination = tmp_path / "report.pdf"
    pdf = fake_response(content=b"%PDF-1.4 test", content_type="application/pdf")

    with mock.patch.object(client.session, "request", return_value=pdf):
        result = client.download_report(str(destination))

    assert result.ok
    assert destination.read_bytes() == b"%PDF-1.4 test"


def test_current_session_reads_the_saved_dataset():
    client = make_client()
    body = {"summary": {"id": "7"}, "records": [], "generation": 2}

    with mock.patch.object(
        client.session, "request", return_value=fake_response(json_data=body)
    ) as request:
        result = client.current_session()

    assert result.payload == body
    assert request.call_args.args == ("GET", "http://testserver/api/session/")
