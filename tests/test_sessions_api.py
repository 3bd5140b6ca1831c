from datetime import timedelta

import pytest

from klassflow.core.clock import utcnow
from klassflow.db.models.attendance import Attendance
from klassflow.db.models.signature_token import SignatureToken


@pytest.fixture
def session(factory, classroom):
    return factory.session(classroom, utcnow() - timedelta(hours=1), hours=2, title="Closures")


def test_staff_routes_require_login(client, session):
    res = client.post(f"/api/sessions/{session.id}/resend-signature", json={"studentId": 1})
    assert res.status_code == 401


def test_students_are_rejected(client, session, student, headers_for):
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id},
        headers=headers_for(student),
    )
    assert res.status_code == 401


def test_other_organization_is_forbidden(client, factory, session, student, headers_for):
    other_org = factory.organization("Other")
    outsider = factory.user("bob@other.test", role="TEACHER", organization=other_org)
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id},
        headers=headers_for(outsider),
    )
    assert res.status_code == 403


def test_resend_signature_issues_30_minute_token(client, db, mailer, session, teacher, student, headers_for):
    before = utcnow()
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id},
        headers=headers_for(teacher),
    )

    assert res.status_code == 200
    data = res.json()
    token = db.query(SignatureToken).one()
    assert data["tokenValue"] == token.token
    assert before + timedelta(minutes=30) <= token.expires_at <= utcnow() + timedelta(minutes=30)
    assert token.email_sent_at is not None
    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == student.email
    assert mailer.sent[0]["url"].endswith(f"/signature/{token.token}")


def test_resend_signature_reuses_unused_token(client, db, factory, session, teacher, student, headers_for):
    existing = factory.token(session, student, expires_at=utcnow() - timedelta(days=1))

    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id},
        headers=headers_for(teacher),
    )

    assert res.json()["tokenValue"] == existing.token
    assert db.query(SignatureToken).count() == 1


def test_resend_signature_unknown_student(client, session, teacher, headers_for):
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": 9999},
        headers=headers_for(teacher),
    )
    assert res.status_code == 404


def test_resend_signature_unknown_session(client, student, teacher, headers_for):
    res = client.post(
        "/api/sessions/9999/resend-signature",
        json={"studentId": student.id},
        headers=headers_for(teacher),
    )
    assert res.status_code == 404


def test_send_attendance_emails_enrolled_students(client, db, factory, mailer, org, classroom, session,
                                                  teacher, student, headers_for):
    bob = factory.user("bob@acme.test", organization=org)
    factory.enroll(classroom, student)
    factory.enroll(classroom, bob)
    old = factory.token(session, student, used_at=utcnow())
    old_value = old.token

    res = client.post(f"/api/sessions/{session.id}/send-attendance", json={}, headers=headers_for(teacher))

    assert res.status_code == 200
    assert res.json()["count"] == 2
    assert {m["to"] for m in mailer.sent} == {student.email, bob.email}
    tokens = db.query(SignatureToken).all()
    assert len(tokens) == 2
    assert old_value not in {t.token for t in tokens}
    assert all(t.email_sent_at is not None for t in tokens)


def test_send_attendance_filters_and_counts_failures(client, factory, mailer, org, classroom, session,
                                                     teacher, student, headers_for):
    bob = factory.user("bob@acme.test", organization=org)
    carol = factory.user("carol@acme.test", organization=org)
    for s in (student, bob, carol):
        factory.enroll(classroom, s)
    mailer.failing.add(bob.email)

    res = client.post(
        f"/api/sessions/{session.id}/send-attendance",
        json={"studentIds": [student.id, bob.id]},
        headers=headers_for(teacher),
    )

    assert res.json()["count"] == 1
    assert [m["to"] for m in mailer.sent] == [student.email]


def test_sign_in_person_for_student(client, db, session, teacher, student, headers_for):
    res = client.post(
        f"/api/sessions/{session.id}/sign",
        json={"studentId": student.id, "signatureData": "data:shared-device"},
        headers=headers_for(teacher),
    )

    assert res.status_code == 200
    attendance = db.query(Attendance).one()
    assert attendance.status == "PRESENT"
    assert attendance.signature_url == "data:shared-device"
    assert attendance.ip_address is None
    assert db.query(SignatureToken).count() == 0


def test_sign_in_person_overwrites_existing_presence(client, db, factory, session, teacher, student, headers_for):
    factory.attendance(session, student, status="PRESENT", signature_url="old")
    client.post(
        f"/api/sessions/{session.id}/sign",
        json={"studentId": student.id, "signatureData": "new"},
        headers=headers_for(teacher),
    )
    assert db.query(Attendance).one().signature_url == "new"


def test_sign_in_person_teacher_signs_session(client, db, session, teacher, headers_for):
    res = client.post(
        f"/api/sessions/{session.id}/sign",
        json={"studentId": teacher.id, "signatureData": "teacher-sig"},
        headers=headers_for(teacher),
    )

    assert res.status_code == 200
    db.refresh(session)
    assert session.teacher_signature == "teacher-sig"
    assert db.query(Attendance).count() == 0


def test_remove_attendance_reopens_token(client, db, factory, session, teacher, student, headers_for):
    token = factory.token(session, student)
    client.post(f"/api/signature/{token.token}", json={"signatureData": "sig"})

    res = client.delete(f"/api/sessions/{session.id}/attendance/{student.id}", headers=headers_for(teacher))

    assert res.status_code == 200
    assert db.query(Attendance).count() == 0
    db.refresh(token)
    assert token.used_at is None
    assert token.expires_at > utcnow() + timedelta(days=6)

    again = client.post(f"/api/signature/{token.token}", json={"signatureData": "sig2"})
    assert again.status_code == 200


def test_generate_tokens(client, db, factory, session, teacher, student, headers_for):
    res = client.post(
        "/api/signature-tokens",
        json={"sessionId": session.id, "studentIds": [student.id]},
        headers=headers_for(teacher),
    )

    assert res.status_code == 200
    tokens = res.json()["tokens"]
    assert len(tokens) == 1
    assert tokens[0]["studentId"] == student.id
    stored = db.query(SignatureToken).one()
    assert tokens[0]["token"] == stored.token
    assert tokens[0]["url"].endswith(f"/signature/{stored.token}")
    assert stored.expires_at == session.start_time + timedelta(minutes=30)


def test_generate_tokens_reuses_unused_token(client, factory, session, teacher, student, headers_for):
    existing = factory.token(session, student)
    res = client.post(
        "/api/signature-tokens",
        json={"sessionId": session.id, "studentIds": [student.id]},
        headers=headers_for(teacher),
    )
    assert res.json()["tokens"][0]["token"] == existing.token


def test_generate_tokens_other_organization(client, factory, session, student, headers_for):
    outsider = factory.user("bob@other.test", role="TEACHER", organization=factory.organization("Other"))
    res = client.post(
        "/api/signature-tokens",
        json={"sessionId": session.id, "studentIds": [student.id]},
        headers=headers_for(outsider),
    )
    assert res.status_code == 404


def test_generate_tokens_requires_students(client, session, teacher, headers_for):
    res = client.post(
        "/api/signature-tokens",
        json={"sessionId": session.id, "studentIds": []},
        headers=headers_for(teacher),
    )
    assert res.status_code == 422


def test_resend_signature_accepts_custom_ttl(client, db, session, teacher, student, headers_for):
    before = utcnow()
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id, "ttlMinutes": 90},
        headers=headers_for(teacher),
    )

    assert res.status_code == 200
    token = db.query(SignatureToken).one()
    assert before + timedelta(minutes=90) <= token.expires_at <= utcnow() + timedelta(minutes=90)


def test_resend_signature_rejects_non_positive_ttl(client, session, teacher, student, headers_for):
    res = client.post(
        f"/api/sessions/{session.id}/resend-signature",
        json={"studentId": student.id, "ttlMinutes": 0},
        headers=headers_for(teacher),
    )
    assert res.status_code == 422
