"""Unit tests for step remarks value objects."""

import json
from dataclasses import replace

from app.domain.value_objects.remarks import (
    LoanRecord,
    PaymentRecord,
    PlainNote,
    RawRemarks,
    coerce_remarks,
    parse_remarks,
    remarks_are_blank,
    remarks_type,
    serialize_remarks,
)


def test_plain_text_parses_to_note():
    """Test that non-JSON text becomes a plain note."""
    remarks = parse_remarks("Site visit done")
    assert remarks == PlainNote("Site visit done")
    assert remarks_type(remarks) == "note"


def test_payment_record_parses_camel_case_keys():
    """Test that a tagged payment object parses into a typed record."""
    raw = json.dumps(
        {
            "type": "payment",
            "amount": 25000,
            "paymentDate": "2026-01-05",
            "paymentMethod": "bank_transfer",
            "transactionReference": "TX-991",
        }
    )
    remarks = parse_remarks(raw)

    assert isinstance(remarks, PaymentRecord)
    assert remarks.amount == 25000.0
    assert remarks.payment_method == "bank_transfer"
    assert remarks.note == ""
    assert remarks_type(remarks) == "payment"


def test_typed_record_round_trips_with_unknown_keys():
    """Test that unknown keys survive serialization."""
    raw = json.dumps(
        {
            "type": "loan_application",
            "loanProvider": "SBI",
            "loanAmount": 300000,
            "interestRate": 8.5,
            "tenure": 60,
            "applicationDate": "2026-02-01",
            "branch": "Pune",
        }
    )
    remarks = parse_remarks(raw)

    assert isinstance(remarks, LoanRecord)
    assert remarks.extra == {"branch": "Pune"}
    payload = json.loads(serialize_remarks(remarks))
    assert payload["branch"] == "Pune"
    assert payload["loanProvider"] == "SBI"
    assert parse_remarks(serialize_remarks(remarks)) == remarks


def test_unknown_json_is_kept_verbatim():
    """Test that JSON without a known tag is preserved as raw text."""
    raw = '{"type": "survey", "roof": "flat"}'
    remarks = parse_remarks(raw)

    assert remarks == RawRemarks(raw)
    assert serialize_remarks(remarks) == raw
    assert remarks_type(remarks) == "raw"


def test_malformed_known_record_is_kept_verbatim():
    """Test that a known tag missing required fields falls back to raw."""
    raw = '{"type": "payment", "amount": 10}'
    assert parse_remarks(raw) == RawRemarks(raw)


def test_invalid_json_is_plain_note():
    """Test that text starting with a brace but not JSON stays a note."""
    assert parse_remarks("{not json") == PlainNote("{not json")


def test_coerce_accepts_dicts_and_records():
    """Test that caller input is normalized to typed remarks."""
    record = coerce_remarks({"type": "loan_approval", "status": "approved"})
    assert remarks_type(record) == "loan_approval"
    assert coerce_remarks(record) is record
    assert coerce_remarks(None) is None


def test_blank_remarks():
    """Test blank detection."""
    assert remarks_are_blank(None)
    assert remarks_are_blank(PlainNote("   "))
    assert not remarks_are_blank(PlainNote("done"))


def test_stored_record_serializes_back_unchanged():
    """Test that a parsed record serializes to the same JSON it was read from."""
    raw = json.dumps(
        {
            "type": "payment",
            "amount": 5000,
            "paymentDate": "2026-03-10",
            "paymentMethod": "upi",
            "transactionReference": "UPI-42",
        }
    )

    assert json.loads(serialize_remarks(parse_remarks(raw))) == json.loads(raw)


def test_stored_record_keeps_explicit_nulls_and_extra_keys():
    """Test that explicit nulls and unknown keys are kept as stored."""
    raw = json.dumps(
        {
            "type": "subsidy_application",
            "applicationReference": "SUB-1",
            "submissionDate": "2026-04-01",
            "subsidyAmount": 78000,
            "subsidyScheme": "PM Surya Ghar",
            "expectedReleaseDate": None,
            "remarks": "",
            "officer": "R. Nair",
        }
    )

    assert json.loads(serialize_remarks(parse_remarks(raw))) == json.loads(raw)


def test_changed_record_field_is_written():
    """Test that a field changed after parsing overrides the stored value."""
    raw = json.dumps(
        {
            "type": "loan_approval",
            "status": "approved",
            "approvedAt": "2026-05-02",
        }
    )
    record = replace(parse_remarks(raw), status="rejected")

    assert json.loads(serialize_remarks(record)) == {
        "type": "loan_approval",
        "status": "rejected",
        "approvedAt": "2026-05-02",
    }


def test_record_built_in_code_omits_absent_optionals():
    """Test that unset optional fields are not written."""
    record = PaymentRecord(
        amount=1200.5,
        payment_date="2026-01-09",
        payment_method="cash",
        transaction_reference="R-7",
    )

    assert json.loads(serialize_remarks(record)) == {
        "type": "payment",
        "amount": 1200.5,
        "paymentDate": "2026-01-09",
        "paymentMethod": "cash",
        "transactionReference": "R-7",
    }
