"""Unit tests for billing status derivation, search and date filtering."""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from appointment_billing.billing import (
    build_billing_rows,
    derive_status,
    display_status,
    format_last_consultation,
    in_date_range,
    is_no_amount,
    join_records,
    matches_query,
    parse_amount,
    reduction_rate,
    resolve_status,
    run_filter_pipeline,
    sort_by_time_desc,
)
from appointment_billing.billing import formatters
from appointment_billing.config import BillingConfig, load_config
from appointment_billing.schemas import Appointment, JoinedRecord, Mutuelle, Patient


def _make_patient(patient_id: str = "p1", **overrides) -> Patient:
    """Helper to create a Patient for testing."""
    data = {"id": patient_id, "numeroPatient": "P001", "nom": "Doe", "prenom": "John"}
    data.update(overrides)
    return Patient.model_validate(data)


def _make_appointment(
    appointment_id: str = "a1",
    patient_id: str = "p1",
    time: str = "2024-03-15T10:00:00",
    **overrides,
) -> Appointment:
    """Helper to create an Appointment using the store's field names."""
    data = {"id": appointment_id, "patientId": patient_id, "time": time}
    data.update(overrides)
    return Appointment.model_validate(data)


def _make_record(**appointment_fields) -> JoinedRecord:
    return JoinedRecord(
        appointment=_make_appointment(**appointment_fields), patient=_make_patient()
    )


# ============================================================================
# AMOUNT TESTS
# ============================================================================


class TestAmounts:
    """Tests for comma-decimal amount parsing."""

    def test_comma_decimal(self):
        assert parse_amount("250,50") == Decimal("250.50")

    def test_missing_and_invalid_are_zero(self):
        """Missing, empty and unparsable text all count as zero."""
        assert parse_amount(None) == 0
        assert parse_amount("") == 0
        assert parse_amount("abc") == 0
        assert parse_amount("NaN") == 0

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("200 DH", Decimal("200")),
            ("  80", Decimal("80")),
            ("12,5,3", Decimal("12.5")),
            (",5", Decimal("0.5")),
            ("-50", Decimal("-50")),
            ("1e3", Decimal("1")),
            ("DH 200", Decimal("0")),
        ],
    )
    def test_leading_number_is_read(self, text, expected):
        """Like a float prefix parse, trailing text after the number is ignored."""
        assert parse_amount(text) == expected

    def test_no_amount_values(self):
        for text in (None, "", "0", "0,00", "0.0"):
            assert is_no_amount(text)
        assert not is_no_amount("12")


# ============================================================================
# STATUS CALCULATOR TESTS
# ============================================================================


class TestStatusCalculator:
    """Tests for amount to status derivation."""

    @pytest.mark.parametrize(
        "amount, label",
        [
            ("0", "-"),
            ("200", "Réduction (50%)"),
            ("400", "Payé"),
            ("500", "Payé"),
            ("", "-"),
            ("0,00", "-"),
            (None, "-"),
            ("abc", "-"),
        ],
    )
    def test_derive_status_table(self, amount, label):
        assert derive_status(amount).label == label

    def test_reduction_carries_rate(self):
        derivation = derive_status("300")
        assert derivation.label == "Réduction (25%)"
        assert derivation.reduction_rate == 25

    def test_amount_with_currency_suffix(self):
        assert derive_status("200 DH").label == "Réduction (50%)"

    def test_comma_amount_is_parsed(self):
        assert derive_status("100,00").label == "Réduction (75%)"

    def test_rate_rounds_half_up(self):
        """(400 - 2) / 400 = 99.5% rounds to 100."""
        assert reduction_rate(Decimal("2")) == 100
        assert reduction_rate(Decimal("399")) == 0

    def test_rate_zero_amount(self):
        assert reduction_rate(Decimal("0")) == 0

    def test_rate_monotonic_and_bounded(self):
        """Reduction never increases with the amount and stays within [0, 100]."""
        rates = [reduction_rate(Decimal(a)) for a in range(1, 401)]
        assert all(0 <= r <= 100 for r in rates)
        assert all(later <= earlier for earlier, later in zip(rates, rates[1:]))

    def test_negative_amount_has_no_status(self):
        assert derive_status("-50").label == "-"

    def test_custom_reference_price(self):
        assert derive_status("100", reference_price=Decimal("200")).label == "Réduction (50%)"

    def test_stored_override_statuses(self):
        """Gratuit and Non payé win over the amount."""
        assert display_status("", "Gratuit") == "Gratuit"
        assert display_status("0", "Non payé") == "Non payé"
        assert display_status("200", "Payé") == "Réduction (50%)"

    def test_resolve_prefers_stored_status(self):
        assert resolve_status("200", "Payé") == "Payé"
        assert resolve_status("200", None) == "Réduction (50%)"


# ============================================================================
# RECORD JOINER TESTS
# ============================================================================


class TestRecordJoiner:
    """Tests for joining appointments to patients."""

    def test_orphans_are_dropped(self):
        appointments = [
            _make_appointment("a1", "p1"),
            _make_appointment("a2", "missing"),
            _make_appointment("a3", "p2"),
        ]
        patients = [_make_patient("p1"), _make_patient("p2")]
        joined = join_records(appointments, patients)
        assert [r.appointment.id for r in joined] == ["a1", "a3"]
        patient_ids = {p.id for p in patients}
        assert all(r.appointment.patient_id in patient_ids for r in joined)

    def test_sort_most_recent_first(self):
        records = [
            _make_record(appointment_id="old", time="2024-03-01T09:00:00"),
            _make_record(appointment_id="new", time="2024-03-15T09:00:00"),
            _make_record(appointment_id="mid", time="2024-03-15T08:59:00"),
        ]
        ordered = sort_by_time_desc(records)
        assert [r.appointment.id for r in ordered] == ["new", "mid", "old"]

    def test_sort_handles_datetime_range_edges(self):
        """Timestamps at the ends of the datetime range sort without errors."""
        records = [
            _make_record(appointment_id="ancient", time="0001-01-01T00:00:00"),
            _make_record(appointment_id="recent", time="2024-01-01T00:00:00"),
            _make_record(appointment_id="too_early", time="0001-01-01T00:30:00+01:00"),
            _make_record(appointment_id="too_late", time="9999-12-31T23:30:00-01:00"),
        ]
        ordered = sort_by_time_desc(records)
        assert [r.appointment.id for r in ordered] == [
            "recent",
            "ancient",
            "too_early",
            "too_late",
        ]

    def test_pipeline_accepts_datetime_range_edges(self):
        appointments = [
            _make_appointment("a1", time="0001-01-01T00:00:00"),
            _make_appointment("a2", time="2024-01-01T00:00:00"),
        ]
        result = run_filter_pipeline(appointments, [_make_patient()])
        assert [r.appointment.id for r in result] == ["a2", "a1"]

    def test_sort_compares_aware_times_in_utc(self):
        records = [
            _make_record(appointment_id="aware", time="2024-03-15T10:00:00+02:00"),
            _make_record(appointment_id="naive", time="2024-03-15T09:00:00"),
        ]
        ordered = sort_by_time_desc(records)
        assert [r.appointment.id for r in ordered] == ["naive", "aware"]

    def test_sort_is_stable_and_unparsable_last(self):
        records = [
            _make_record(appointment_id="bad", time="not a date"),
            _make_record(appointment_id="first", time="2024-03-15T09:00:00"),
            _make_record(appointment_id="second", time="2024-03-15T09:00:00"),
        ]
        ordered = sort_by_time_desc(records)
        assert [r.appointment.id for r in ordered] == ["first", "second", "bad"]


# ============================================================================
# SEARCH MATCHER TESTS
# ============================================================================


class TestSearchMatcher:
    """Tests for tokenized search over record fields."""

    @pytest.fixture
    def record(self) -> JoinedRecord:
        return _make_record(
            amount="200",
            paymentMethod="Espèces",
            mutuelle={"active": True, "nom": "CNOPS"},
        )

    def test_wildcard_token(self, record):
        assert matches_query(record, "*jo*")

    def test_all_tokens_required(self, record):
        assert matches_query(record, "john doe")
        assert not matches_query(record, "john smith")

    def test_empty_query_matches(self, record):
        assert matches_query(record, "")
        assert matches_query(record, "   ")
        assert matches_query(record, None)

    def test_bare_wildcards_match_everything(self, record):
        assert matches_query(record, "*")
        assert matches_query(record, "**")

    def test_case_insensitive(self, record):
        assert matches_query(record, "DOE cnops")

    def test_searches_amount_and_payment(self, record):
        assert matches_query(record, "200 espèces")
        assert matches_query(record, "p001")

    def test_plain_token_is_substring(self, record):
        assert matches_query(record, "oh")

    def test_absent_fields_are_skipped(self):
        record = _make_record()
        assert not matches_query(record, "none")


# ============================================================================
# DATE RANGE FILTER TESTS
# ============================================================================


class TestDateRangeFilter:
    """Tests for the inclusive date range filter."""

    def test_inside_range(self):
        record = _make_record(time="2024-03-15T10:00:00")
        assert in_date_range(record, "2024-03-01", "2024-03-31")

    def test_outside_range(self):
        record = _make_record(time="2024-03-15T10:00:00")
        assert not in_date_range(record, "2024-04-01", "2024-04-30")

    def test_bounds_are_inclusive(self):
        assert in_date_range(_make_record(time="2024-03-01T00:00:00"), "2024-03-01", "2024-03-31")
        assert in_date_range(_make_record(time="2024-03-31T23:30:00"), "2024-03-01", "2024-03-31")
        assert not in_date_range(
            _make_record(time="2024-04-01T00:00:00"), "2024-03-01", "2024-03-31"
        )

    def test_missing_bound_disables_filter(self):
        record = _make_record(time="2020-01-01T10:00:00")
        assert in_date_range(record, "2024-03-01", None)
        assert in_date_range(record, "", "2024-03-31")

    def test_date_objects_accepted(self):
        record = _make_record(time="2024-03-15T10:00:00Z")
        assert in_date_range(record, date(2024, 3, 15), date(2024, 3, 15))

    def test_unparsable_time_fails_active_range(self):
        record = _make_record(time="soon")
        assert not in_date_range(record, "2024-03-01", "2024-03-31")


# ============================================================================
# FILTER PIPELINE TESTS
# ============================================================================


class TestFilterPipeline:
    """Tests for the combined join, search and date pipeline."""

    @pytest.fixture
    def data(self):
        patients = [
            _make_patient("p1"),
            _make_patient("p2", numeroPatient="P002", nom="Smith", prenom="Anna"),
        ]
        appointments = [
            _make_appointment("a1", "p1", "2024-03-10T09:00:00", amount="400"),
            _make_appointment("a2", "p2", "2024-03-20T09:00:00", amount="200"),
            _make_appointment("a3", "ghost", "2024-03-25T09:00:00"),
            _make_appointment("a4", "p1", "2024-04-02T09:00:00"),
        ]
        return appointments, patients

    def test_search_and_dates_combine(self, data):
        appointments, patients = data
        result = run_filter_pipeline(
            appointments, patients, "doe", "2024-03-01", "2024-03-31"
        )
        assert [r.appointment.id for r in result] == ["a1"]

    def test_no_filters_keeps_joined_sorted(self, data):
        appointments, patients = data
        result = run_filter_pipeline(appointments, patients)
        assert [r.appointment.id for r in result] == ["a4", "a2", "a1"]

    def test_recompute_is_idempotent(self, data):
        appointments, patients = data
        first = run_filter_pipeline(appointments, patients, "*a*")
        second = run_filter_pipeline(appointments, patients, "*a*")
        assert first == second
        assert build_billing_rows(first) == build_billing_rows(second)


# ============================================================================
# CONSULTATION AGE TESTS
# ============================================================================


class TestConsultationAge:
    """Tests for the last paid consultation age text."""

    NOW = datetime(2024, 3, 20, 12, 0)

    @pytest.mark.parametrize(
        "consulted, expected",
        [
            ("2024-03-20T08:00:00", "150,00 DH - depuis 1 jour"),
            ("2024-03-19T12:00:00", "150,00 DH - depuis 1 jour"),
            ("2024-03-10T12:00:00", "150,00 DH - depuis 10 jours"),
            ("2024-02-15T12:00:00", "150,00 DH - depuis 1 mois"),
            ("2023-12-01", "150,00 DH - depuis 3 mois"),
        ],
    )
    def test_age_buckets(self, consulted, expected):
        assert format_last_consultation("150", consulted, now=self.NOW) == expected

    def test_no_amount(self):
        assert format_last_consultation("0,00", "2024-03-10T12:00:00", now=self.NOW) == "-"
        assert format_last_consultation(None, "2024-03-10T12:00:00", now=self.NOW) == "-"

    def test_unreadable_date(self):
        assert format_last_consultation("150", "yesterday", now=self.NOW) == "-"

    def test_custom_formatter(self):
        text = format_last_consultation(
            "150", "2024-03-10T12:00:00", now=self.NOW, formatter=lambda a: f"{a} MAD"
        )
        assert text == "150 MAD - depuis 10 jours"


# ============================================================================
# DISPLAY ROW TESTS
# ============================================================================


class TestDisplayRows:
    """Tests for formatting helpers and display rows."""

    def test_amount_formatter(self):
        assert formatters.amount("1250,5") == "1 250,50 DH"
        assert formatters.amount("200") == "200,00 DH"

    def test_amount_display_dash_for_no_amount(self):
        assert formatters.amount_display("0,00") == "-"
        assert formatters.amount_display("80") == "80,00 DH"

    def test_patient_name(self):
        assert formatters.patient_name("dupont", "jEAN") == "DUPONT Jean"
        assert formatters.patient_name("dupont", None) == ""

    def test_mutuelle_display(self):
        assert formatters.mutuelle_display(Mutuelle(active=True, nom="CNSS")) == "Oui - CNSS"
        assert formatters.mutuelle_display(Mutuelle(active=False, nom="CNSS")) == "Non"
        assert formatters.mutuelle_display(None) == "Non"

    def test_row_fields(self):
        record = _make_record(amount="100", paymentMethod="Virement")
        (row,) = build_billing_rows([record], now=datetime(2024, 3, 20))
        assert row.patient_number == "P001"
        assert row.patient_name == "DOE John"
        assert row.amount_display == "100,00 DH"
        assert row.status_label == "Réduction (75%)"
        assert row.status_tone == "reduction"
        assert row.payment_method == "Virement"
        assert row.mutuelle_display == "Non"
        assert row.last_consultation == "-"
        assert not row.is_editing

    def test_row_defaults(self):
        (row,) = build_billing_rows([_make_record(status="Gratuit")])
        assert row.amount_display == "-"
        assert row.status_label == "Gratuit"
        assert row.status_tone == "gratuit"
        assert row.payment_method == "-"


# ============================================================================
# CONFIG TESTS
# ============================================================================


class TestConfig:
    """Tests for loading billing configuration."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.json")
        assert config == BillingConfig()
        assert config.reference_price == Decimal("400")

    def test_section_is_loaded(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"billing": {"reference_price": "350", "currency": "MAD"}}))
        config = load_config(path)
        assert config.reference_price == Decimal("350")
        assert config.currency == "MAD"
        assert "Chèque" in config.payment_methods

    def test_missing_section_uses_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"other": {}}))
        assert load_config(path) == BillingConfig()
