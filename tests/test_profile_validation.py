from interview_engine.core.profile_validation import (
    find_missing_fields,
    is_valid_email,
    is_valid_phone,
    normalize_profile,
    sanitize_field,
)
from interview_engine.core.resume_intake import (
    DOCX_MIME_TYPE,
    PDF_MIME_TYPE,
    LocalBlobStore,
    detect_resume_type,
)
from interview_engine.models import CandidateProfile, RequiredProfileField


def test_email_rules() -> None:
    assert is_valid_email("  ada@example.com ")
    assert not is_valid_email("ada@example")
    assert not is_valid_email("")
    assert len(sanitize_field(RequiredProfileField.EMAIL, "a" * 150)) == 100


def test_phone_keeps_last_ten_digits() -> None:
    assert sanitize_field(RequiredProfileField.PHONE, "+44 (020) 7946-0958 ext") == "2079460958"
    assert is_valid_phone("555.123.4567")
    assert not is_valid_phone("12345")


def test_missing_fields_in_declaration_order() -> None:
    profile = CandidateProfile(name="  ", email="bad", phone="5551234567")

    assert find_missing_fields(profile) == [RequiredProfileField.NAME, RequiredProfileField.EMAIL]


def test_normalize_profile_sanitizes_and_recomputes() -> None:
    profile = CandidateProfile(
        name=" Ada ",
        email=" ada@example.com ",
        phone="1-555-123-4567",
        missing_fields=[RequiredProfileField.NAME],
    )

    normalized = normalize_profile(profile)

    assert normalized.name == "Ada"
    assert normalized.email == "ada@example.com"
    assert normalized.phone == "5551234567"
    assert normalized.missing_fields == []
    assert profile.name == " Ada "


def test_detect_resume_type() -> None:
    assert detect_resume_type("CV.PDF", None) == PDF_MIME_TYPE
    assert detect_resume_type("upload", DOCX_MIME_TYPE) == DOCX_MIME_TYPE
    assert detect_resume_type("notes.txt", "text/plain") is None


def test_local_blob_store(tmp_path) -> None:
    store = LocalBlobStore(tmp_path / "blobs")

    store.put("resume:abc", b"bytes")

    assert store.get("resume:abc") == b"bytes"
    store.delete("resume:abc")
    assert store.get("resume:abc") is None
