"""Unit tests for client document rendering."""

from datetime import datetime, timezone
from urllib.parse import unquote

import pytest

from mirotrak.models.settings import EmailTemplate, PdfTemplate
from mirotrak.services.documents import (
    DocumentIssuer,
    DocumentRenderer,
    build_variables,
    document_filename,
    document_number,
    format_amount,
    render_template,
)

NOW = datetime(2026, 1, 15, 9, 5, 7, tzinfo=timezone.utc)

CLIENT = {
    "clientName": "TechCorp Solutions",
    "contactPerson": "Marie Dubois",
    "email": "marie.dubois@techcorp.example",
    "phone": "+33 1 23 45 67 89",
    "company": "TechCorp",
    "projectType": "Application Web",
    "technologies": "React, Node.js",
    "budget": 50000,
    "status": "En cours",
    "progress": None,
    "notes": None,
}


@pytest.mark.unit
class TestFormatting:
    """Unit tests for amount, number and filename formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(50000, "50 000"), (1234.5, "1 234,5"), (0, "0"), (999.99, "999,99")],
    )
    def test_format_amount_uses_french_grouping(self, value: float, expected: str) -> None:
        assert format_amount(value) == expected

    def test_document_number_is_last_eight_millisecond_digits(self) -> None:
        number = document_number(NOW)

        assert len(number) == 8
        assert str(int(NOW.timestamp() * 1000)).endswith(number)

    def test_document_filename_replaces_whitespace(self) -> None:
        filename = document_filename("devis", "TechCorp  Solutions SA", NOW)

        assert filename == f"devis_TechCorp_Solutions_SA_{int(NOW.timestamp() * 1000)}.pdf"


@pytest.mark.unit
class TestTemplateVariables:
    """Unit tests for placeholder values and substitution."""

    def test_budget_derived_values(self) -> None:
        variables = build_variables(CLIENT, NOW)

        assert variables["budget"] == "50 000"
        assert variables["budgetTVA"] == "10000.00"
        assert variables["budgetTTC"] == "60000.00"

    def test_missing_fields_render_empty_and_progress_defaults_to_zero(self) -> None:
        variables = build_variables(CLIENT, NOW)

        assert variables["notes"] == ""
        assert variables["address"] == ""
        assert variables["progress"] == "0"

    def test_date_and_time_formats(self) -> None:
        variables = build_variables(CLIENT, NOW)

        assert variables["currentDate"] == "15/01/2026"
        assert variables["currentTime"] == "09:05:07"

    def test_unknown_placeholders_are_left_untouched(self) -> None:
        result = render_template("{{clientName}} - {{unknown}}", {"clientName": "ACME"})

        assert result == "ACME - {{unknown}}"


@pytest.mark.unit
class TestDocumentRenderer:
    """Unit tests for preview, email and PDF generation."""

    @pytest.fixture
    def renderer(self) -> DocumentRenderer:
        issuer = DocumentIssuer(name="MiroTrak", email="contact@mirotrak.example", siret="123 456 789")
        return DocumentRenderer(issuer=issuer, now=NOW)

    def test_render_fills_template(self, renderer: DocumentRenderer) -> None:
        template = PdfTemplate(name="Devis", content="DEVIS pour {{clientName}}\nTotal: {{budget}} €")

        document = renderer.render("devis", template, CLIENT)

        assert document.type == "devis"
        assert document.name == "Devis"
        assert document.content == "DEVIS pour TechCorp Solutions\nTotal: 50 000 €"
        assert document.number == document_number(NOW)

    def test_build_email_spells_out_euro_and_appends_attachment_note(
        self, renderer: DocumentRenderer
    ) -> None:
        template = EmailTemplate(
            subject="Devis {{projectType}}",
            body="Bonjour {{contactPerson}}, total {{budgetTTC}} € TTC",
        )

        email = renderer.build_email("devis", template, CLIENT)

        assert email["to"] == CLIENT["email"]
        assert email["subject"] == "Devis Application Web"
        assert email["body"].startswith("Bonjour Marie Dubois, total 60000.00 euros TTC")
        assert "€" not in email["body"]
        assert email["body"].endswith(f"Nom du fichier: {email['filename']}")
        assert email["filename"].startswith("devis_TechCorp_Solutions_")

    def test_mailto_link_is_url_encoded(self, renderer: DocumentRenderer) -> None:
        template = EmailTemplate(subject="Devis & suivi", body="Ligne 1\nLigne 2")

        email = renderer.build_email("devis", template, CLIENT)

        prefix = f"mailto:{CLIENT['email']}?subject="
        assert email["mailto"].startswith(prefix)
        assert " " not in email["mailto"]
        encoded_subject, encoded_body = email["mailto"][len(prefix):].split("&body=")
        assert unquote(encoded_subject) == "Devis & suivi"
        assert unquote(encoded_body) == email["body"]

    @pytest.mark.parametrize("doc_type", ["devis", "facture"])
    def test_build_pdf_returns_pdf_bytes(self, renderer: DocumentRenderer, doc_type: str) -> None:
        template = PdfTemplate(
            name="Devis",
            content="CLIENT\n━━━━━━━━━━━━\n{{clientName}}\n\nMONTANT\n━━━━━━━━━━━━\n{{budgetTTC}} €",
        )
        document = renderer.render(doc_type, template, CLIENT)

        pdf = renderer.build_pdf(document, CLIENT)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_issuer_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIROTRAK_ISSUER_NAME", "Studio Test")
        monkeypatch.setenv("MIROTRAK_ISSUER_SIRET", "987 654 321")

        issuer = DocumentIssuer.from_env()

        assert issuer.name == "Studio Test"
        assert issuer.siret == "987 654 321"
        assert issuer.tagline == DocumentIssuer().tagline
