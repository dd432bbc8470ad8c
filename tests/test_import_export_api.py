import io

from conftest import auth_header, invite, login

HEADER = "name,email,role,status,another_tech"


def _upload(client, token, text, filename="candidates.csv", content_type="text/csv"):
    return client.post(
        "/api/v1/candidates/import",
        headers=auth_header(token),
        data={"file": (io.BytesIO(text.encode("utf-8")), filename, content_type)},
        content_type="multipart/form-data",
    )


def test_import_all_rows(recruiter):
    _app, client, token = recruiter
    res = _upload(client, token, f"{HEADER}\nAda,ada@example.com,Backend,INTERVIEW,Go;Rust\nLin,lin@example.com,QA,,")

    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["outcome"] == "success"
    assert body["summary"] == {"total": 2, "success": 2, "errors": 0, "duplicates": 0}

    listing = client.get("/api/v1/candidates", headers=auth_header(token)).get_json()["data"]
    by_email = {c["email"]: c for c in listing["candidates"]}
    assert by_email["ada@example.com"]["anotherTech"] == ["Go", "Rust"]
    assert by_email["ada@example.com"]["status"] == "INTERVIEW"
    assert by_email["lin@example.com"]["status"] == "APPLIED"


def test_import_partial_returns_207(recruiter):
    _app, client, token = recruiter
    client.post(
        "/api/v1/candidates",
        headers=auth_header(token),
        json={"name": "Old", "email": "old@example.com", "role": "QA"},
    )

    res = _upload(
        client,
        token,
        f"{HEADER}\nNew,new@example.com,QA,,\nOld,old@example.com,QA,,\nBroken,,QA,,\nShort,row",
    )

    assert res.status_code == 207
    body = res.get_json()
    assert body["success"] is True
    assert body["outcome"] == "partial"
    assert body["summary"] == {"total": 4, "success": 1, "errors": 2, "duplicates": 1}
    assert body["results"]["duplicates"][0]["row"] == 3
    assert [e["row"] for e in body["results"]["errors"]] == [4, 5]


def test_import_all_bad_returns_400(recruiter):
    _app, client, token = recruiter
    res = _upload(client, token, f"{HEADER}\n,,,,")

    assert res.status_code == 400
    body = res.get_json()
    assert body["success"] is False
    assert body["outcome"] == "failed"
    assert body["message"] == "Import failed: No candidates imported due to validation errors"


def test_import_records_one_audit_event(recruiter):
    _app, client, token = recruiter
    _upload(client, token, f"{HEADER}\nA,a@example.com,QA,,\nB,b@example.com,QA,,", filename="batch.csv")

    res = client.get("/api/v1/audit?entityId=bulk&entityType=candidate", headers=auth_header(token))
    entries = res.get_json()["data"]
    assert len(entries) == 1
    assert entries[0]["action"] == "imported"
    assert entries[0]["diff"] == {"count": 2, "fileName": "batch.csv"}


def test_import_rejects_non_csv(recruiter):
    _app, client, token = recruiter
    res = _upload(client, token, "whatever", filename="people.txt", content_type="text/plain")
    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "INVALID_FILE_KIND"


def test_import_rejects_empty_file(recruiter):
    _app, client, token = recruiter
    res = _upload(client, token, "\n\n")
    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "EMPTY_INPUT"


def test_import_requires_file(recruiter):
    _app, client, token = recruiter
    res = client.post(
        "/api/v1/candidates/import", headers=auth_header(token), data={}, content_type="multipart/form-data"
    )
    assert res.status_code == 400
    assert res.get_json()["error"]["message"] == "No file provided"


def test_import_forbidden_for_viewer(recruiter):
    _app, client, token = recruiter
    invite(client, token, email="viewer@example.com", role="VIEWER")
    viewer = login(client, "viewer@example.com")

    res = _upload(client, viewer, f"{HEADER}\nA,a@example.com,QA,,")
    assert res.status_code == 403
    assert client.get("/api/v1/candidates", headers=auth_header(token)).get_json()["data"]["total"] == 0


def test_export_then_reimport(recruiter):
    _app, client, token = recruiter
    created = client.post(
        "/api/v1/candidates",
        headers=auth_header(token),
        json={
            "name": "Grace, H.",
            "email": "grace@example.com",
            "role": "Backend",
            "project": 'The "Cobol" one',
            "anotherTech": ["Docker", "K8s"],
            "status": "OFFER",
            "level": "Senior",
            "interviewSchedule": "2024-05-01T09:30:00Z",
        },
    ).get_json()["data"]

    res = client.get("/api/v1/candidates/export", headers=auth_header(token))
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert 'filename="candidates_export_' in res.headers["Content-Disposition"]
    csv_text = res.get_data(as_text=True)
    assert csv_text.splitlines()[0].startswith("name,email,role,project,interviewer")
    assert '"Grace, H."' in csv_text

    client.delete(f"/api/v1/candidates/{created['_id']}", headers=auth_header(token))
    res = _upload(client, token, csv_text, filename="roundtrip.csv")
    assert res.status_code == 200

    again = client.get("/api/v1/candidates", headers=auth_header(token)).get_json()["data"]["candidates"][0]
    for key in ("name", "email", "role", "project", "anotherTech", "status", "level", "interviewSchedule"):
        assert again[key] == created[key], key


def test_export_filters_by_status(recruiter):
    _app, client, token = recruiter
    for email, status in (("a@example.com", "APPLIED"), ("b@example.com", "REJECTED")):
        client.post(
            "/api/v1/candidates",
            headers=auth_header(token),
            json={"name": "X", "email": email, "role": "QA", "status": status},
        )

    csv_text = client.get("/api/v1/candidates/export?status=REJECTED", headers=auth_header(token)).get_data(as_text=True)
    lines = csv_text.split("\n")
    assert len(lines) == 2
    assert '"b@example.com"' in lines[1]
