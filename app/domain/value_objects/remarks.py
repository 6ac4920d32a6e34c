"""Step remarks value objects.

Remarks are stored as text. Office workflows (payment, loan, subsidy, net
metering) store a JSON object tagged with ``type``; everything else is a plain
note. Parsing never fails: unknown JSON objects are kept verbatim as
``RawRemarks`` so they serialize back unchanged.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Optional, Union


@dataclass(frozen=True)
class PlainNote:
    """Free-text remark."""

    text: str

    def serialize(self) -> str:
        return self.text

    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class RawRemarks:
    """JSON remark whose shape is not recognized."""

    raw: str

    def serialize(self) -> str:
        return self.raw

    def is_blank(self) -> bool:
        return not self.raw.strip()


class _JsonRecord:
    """Shared JSON mapping for structured remarks.

    Subclasses list ``(attribute, json_key, converter)`` triples in
    ``FIELD_MAP``; unknown keys survive in ``extra``. A parsed record keeps
    its stored payload in ``source`` so unchanged fields serialize back in
    their stored form.
    """

    TYPE_TAG: ClassVar[str]
    FIELD_MAP: ClassVar[tuple[tuple[str, str, Optional[Callable[[Any], Any]]], ...]]
    OPTIONAL: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def _decode(cls, attr: str, value: Any, converter: Optional[Callable[[Any], Any]]) -> Any:
        if value is None:
            if attr not in cls.OPTIONAL:
                raise ValueError(f"{attr} is required")
            return "" if attr == "note" else None
        return converter(value) if converter else value

    @classmethod
    def from_payload(cls, payload: dict[str, Any]):
        kwargs: dict[str, Any] = {}
        known = {"type"}
        for attr, key, converter in cls.FIELD_MAP:
            known.add(key)
            if key not in payload and attr not in cls.OPTIONAL:
                raise KeyError(key)
            kwargs[attr] = cls._decode(attr, payload.get(key), converter)
        kwargs["extra"] = {k: v for k, v in payload.items() if k not in known}
        kwargs["source"] = dict(payload)
        return cls(**kwargs)

    def to_payload(self) -> dict[str, Any]:
        source: dict[str, Any] = getattr(self, "source")
        payload: dict[str, Any] = {"type": self.TYPE_TAG}
        payload.update(getattr(self, "extra"))
        for attr, key, converter in self.FIELD_MAP:
            value = getattr(self, attr)
            if key in source and self._decode(attr, source[key], converter) == value:
                payload[key] = source[key]
            elif value is not None and not (attr == "note" and value == ""):
                payload[key] = value
        return payload

    def serialize(self) -> str:
        return json.dumps(self.to_payload())

    def is_blank(self) -> bool:
        return False


@dataclass(frozen=True)
class PaymentRecord(_JsonRecord):
    """Payment received for a lead."""

    TYPE_TAG: ClassVar[str] = "payment"
    FIELD_MAP: ClassVar = (
        ("amount", "amount", float),
        ("payment_date", "paymentDate", str),
        ("payment_method", "paymentMethod", str),
        ("transaction_reference", "transactionReference", str),
        ("note", "remarks", str),
        ("recorded_at", "recordedAt", str),
    )
    OPTIONAL: ClassVar = frozenset({"note", "recorded_at"})

    amount: float
    payment_date: str
    payment_method: str  # cash, cheque, bank_transfer, upi, card, other
    transaction_reference: str
    note: str = ""
    recorded_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class LoanRecord(_JsonRecord):
    """Loan application submitted on behalf of a lead."""

    TYPE_TAG: ClassVar[str] = "loan_application"
    FIELD_MAP: ClassVar = (
        ("loan_provider", "loanProvider", str),
        ("loan_amount", "loanAmount", float),
        ("interest_rate", "interestRate", float),
        ("tenure", "tenure", int),
        ("application_date", "applicationDate", str),
        ("application_reference", "applicationReference", str),
        ("note", "remarks", str),
        ("initiated_at", "initiatedAt", str),
    )
    OPTIONAL: ClassVar = frozenset({"application_reference", "note", "initiated_at"})

    loan_provider: str
    loan_amount: float
    interest_rate: float
    tenure: int  # months
    application_date: str
    application_reference: Optional[str] = None
    note: str = ""
    initiated_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class LoanApprovalRecord(_JsonRecord):
    """Lender decision on a loan application."""

    TYPE_TAG: ClassVar[str] = "loan_approval"
    FIELD_MAP: ClassVar = (
        ("status", "status", str),
        ("note", "remarks", str),
        ("approved_at", "approvedAt", str),
    )
    OPTIONAL: ClassVar = frozenset({"note", "approved_at"})

    status: str  # approved or rejected
    note: str = ""
    approved_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class SubsidyRecord(_JsonRecord):
    """Government subsidy application."""

    TYPE_TAG: ClassVar[str] = "subsidy_application"
    FIELD_MAP: ClassVar = (
        ("application_reference", "applicationReference", str),
        ("submission_date", "submissionDate", str),
        ("subsidy_amount", "subsidyAmount", float),
        ("subsidy_scheme", "subsidyScheme", str),
        ("expected_release_date", "expectedReleaseDate", str),
        ("note", "remarks", str),
        ("recorded_at", "recordedAt", str),
    )
    OPTIONAL: ClassVar = frozenset({"expected_release_date", "note", "recorded_at"})

    application_reference: str
    submission_date: str
    subsidy_amount: float
    subsidy_scheme: str
    expected_release_date: Optional[str] = None
    note: str = ""
    recorded_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class NetMeterRecord(_JsonRecord):
    """Net metering application filed with the distribution company."""

    TYPE_TAG: ClassVar[str] = "net_meter_application"
    FIELD_MAP: ClassVar = (
        ("application_reference", "applicationReference", str),
        ("submission_date", "submissionDate", str),
        ("discom_name", "discomName", str),
        ("meter_capacity", "meterCapacity", str),
        ("note", "remarks", str),
        ("recorded_at", "recordedAt", str),
    )
    OPTIONAL: ClassVar = frozenset({"note", "recorded_at"})

    application_reference: str
    submission_date: str
    discom_name: str
    meter_capacity: str
    note: str = ""
    recorded_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)
    source: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


Remarks = Union[
    PlainNote,
    PaymentRecord,
    LoanRecord,
    LoanApprovalRecord,
    SubsidyRecord,
    NetMeterRecord,
    RawRemarks,
]

_RECORD_TYPES: dict[str, type] = {
    record.TYPE_TAG: record
    for record in (PaymentRecord, LoanRecord, LoanApprovalRecord, SubsidyRecord, NetMeterRecord)
}


def parse_remarks(raw: Optional[str]) -> Optional[Remarks]:
    """
    Parse stored remarks text into a typed remark.

    Args:
        raw: Stored remarks text, or None

    Returns:
        Typed remark, or None when no remarks were stored
    """
    if raw is None:
        return None

    if not raw.lstrip().startswith("{"):
        return PlainNote(raw)

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return PlainNote(raw)

    if not isinstance(payload, dict):
        return RawRemarks(raw)

    tag = payload.get("type")
    record_type = _RECORD_TYPES.get(tag) if isinstance(tag, str) else None
    if record_type is None:
        return RawRemarks(raw)

    try:
        return record_type.from_payload(payload)
    except (KeyError, TypeError, ValueError):
        # Known tag with a malformed body: keep it verbatim
        return RawRemarks(raw)


def coerce_remarks(value: Union[str, dict, Remarks, None]) -> Optional[Remarks]:
    """
    Normalize caller input (text, JSON object or typed remark) to a typed remark.

    Args:
        value: Remarks text, decoded JSON object, typed remark, or None

    Returns:
        Typed remark, or None
    """
    if value is None or isinstance(value, str):
        return parse_remarks(value)
    if isinstance(value, dict):
        return parse_remarks(json.dumps(value))
    return value


def serialize_remarks(remarks: Optional[Remarks]) -> Optional[str]:
    """Serialize a typed remark back to its stored text form."""
    if remarks is None:
        return None
    return remarks.serialize()


def remarks_are_blank(remarks: Optional[Remarks]) -> bool:
    """True when no usable remarks were given."""
    return remarks is None or remarks.is_blank()


def remarks_type(remarks: Optional[Remarks]) -> Optional[str]:
    """Return the type tag used in activity log snapshots."""
    if remarks is None:
        return None
    if isinstance(remarks, PlainNote):
        return "note"
    if isinstance(remarks, RawRemarks):
        return "raw"
    return remarks.TYPE_TAG


__all__ = [
    "LoanApprovalRecord",
    "LoanRecord",
    "NetMeterRecord",
    "PaymentRecord",
    "PlainNote",
    "RawRemarks",
    "Remarks",
    "SubsidyRecord",
    "coerce_remarks",
    "parse_remarks",
    "remarks_are_blank",
    "remarks_type",
    "serialize_remarks",
]
