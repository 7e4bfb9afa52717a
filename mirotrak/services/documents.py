"""Client document generation.

Templates are plain text with ``{{variable}}`` placeholders. Rendering fills
them from a client record plus a few derived values (VAT amounts, current date,
document number), then lays the result out as a PDF or prepares an email.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import quote

import structlog
from fpdf import FPDF

from mirotrak.models.settings import EmailTemplate, PdfTemplate

logger = structlog.get_logger(__name__)

VAT_RATE = 0.20
QUOTE_VALIDITY_DAYS = 30
SECTION_MARKER = "━━━"
SIGNED_DOCUMENT_TYPES = ("devis", "contrat")

CLIENT_VARIABLES = (
    "clientName",
    "contactPerson",
    "email",
    "phone",
    "company",
    "address",
    "city",
    "postalCode",
    "country",
    "projectType",
    "technologies",
    "startDate",
    "endDate",
    "status",
    "notes",
    "website",
)

LEGAL_MENTIONS = (
    "Conditions de paiement : 50% à la commande, 50% à la livraison. "
    "Paiement par virement bancaire sous 30 jours.",
    "TVA : TVA non applicable, art. 293 B du CGI (auto-entrepreneur) ou TVA à 20% selon statut.",
    "Pénalités de retard : En cas de retard de paiement, des pénalités égales à 3 fois "
    "le taux d'intérêt légal seront appliquées.",
    "Indemnité forfaitaire : Une indemnité forfaitaire de 40€ pour frais de recouvrement "
    "sera exigée (art. L441-6 du Code de Commerce).",
    "Propriété intellectuelle : Les livrables restent la propriété du prestataire "
    "jusqu'au paiement intégral.",
    "Garantie : Garantie de 3 mois sur les bugs et dysfonctionnements. Maintenance évolutive sur devis.",
    "Annulation : Toute annulation doit être notifiée par écrit. "
    "L'acompte reste acquis en cas d'annulation client.",
    "Juridiction : Tout litige sera soumis aux tribunaux compétents du siège du prestataire.",
)

ATTACHMENT_NOTE = (
    "\n\n---\nNote: Le PDF a été téléchargé automatiquement. "
    "Veuillez le joindre manuellement à cet email avant l'envoi.\n"
    "Nom du fichier: {filename}"
)

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

# Characters encodeURIComponent leaves untouched
_URI_SAFE = "-_.!~*'()"

# RGB
PRIMARY_COLOR = (33, 38, 45)
ACCENT_COLOR = (88, 166, 255)
LIGHT_GRAY = (246, 248, 250)
BORDER_COLOR = (208, 215, 222)


@dataclass(frozen=True)
class DocumentIssuer:
    """Identity printed in document headers, party blocks and footers."""

    name: str = "MiroTrak"
    tagline: str = "Solutions Digitales & Développement Web"
    title: str = "Développeur Web Full-Stack"
    address: str = ""
    city: str = ""
    email: str = ""
    phone: str = ""
    siret: str = ""
    signatory: str = ""

    @classmethod
    def from_env(cls) -> "DocumentIssuer":
        """Build the issuer from ``MIROTRAK_ISSUER_*`` environment variables."""
        defaults = cls()
        return cls(
            **{
                name: os.getenv(f"MIROTRAK_ISSUER_{name.upper()}", getattr(defaults, name))
                for name in cls.__dataclass_fields__
            }
        )


@dataclass(frozen=True)
class RenderedDocument:
    """Template filled in for one client."""

    type: str
    name: str
    content: str
    number: str


def format_amount(value: float) -> str:
    """Format an amount with French grouping: ``50000`` -> ``50 000``, ``1234.5`` -> ``1 234,5``."""
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return text.replace(",", " ").replace(".", ",")


def document_number(now: datetime) -> str:
    """Last eight digits of the epoch timestamp in milliseconds."""
    return str(int(now.timestamp() * 1000))[-8:]


def document_filename(doc_type: str, client_name: str, now: datetime) -> str:
    """Download name: ``{type}_{Client_Name}_{millis}.pdf``."""
    safe_name = re.sub(r"\s+", "_", client_name or "client")
    return f"{doc_type}_{safe_name}_{int(now.timestamp() * 1000)}.pdf"


def build_variables(client: dict[str, Any], now: datetime) -> dict[str, str]:
    """Compute placeholder values for a camelCase client record."""
    variables = {
        name: "" if client.get(name) in (None, "") else str(client[name])
        for name in CLIENT_VARIABLES
    }

    try:
        budget = float(client.get("budget") or 0)
    except (TypeError, ValueError):
        budget = 0.0

    variables.update(
        {
            "budget": format_amount(budget),
            "budgetTVA": f"{budget * VAT_RATE:.2f}",
            "budgetTTC": f"{budget * (1 + VAT_RATE):.2f}",
            "progress": str(client.get("progress") or 0),
            "currentDate": now.strftime("%d/%m/%Y"),
            "currentTime": now.strftime("%H:%M:%S"),
            "documentNumber": document_number(now),
        }
    )
    return variables


def render_template(template: str, variables: dict[str, str]) -> str:
    """Replace known ``{{name}}`` placeholders; unknown ones are left untouched."""
    return _PLACEHOLDER.sub(lambda match: variables.get(match.group(1), match.group(0)), template)


def spell_out_euro(text: str) -> str:
    return text.replace("€", "euros")


def _latin1(text: str) -> str:
    """Core PDF fonts only cover latin-1."""
    text = spell_out_euro(text).replace("’", "'").replace("–", "-").replace("—", "-")
    return text.encode("latin-1", "replace").decode("latin-1")


class _DocumentPDF(FPDF):
    """A4 page with the issuer footer on every page."""

    def __init__(self, issuer: DocumentIssuer, footer_label: str):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.issuer = issuer
        self.footer_label = footer_label
        self.set_margins(15, 15, 15)
        self.set_auto_page_break(auto=True, margin=22)

    def footer(self) -> None:
        self.set_draw_color(*BORDER_COLOR)
        self.set_line_width(0.3)
        self.line(15, 282, 195, 282)

        self.set_font("Helvetica", "", 7)
        self.set_text_color(100, 100, 100)
        self.set_xy(15, 284)
        self.cell(60, 4, _latin1(self.issuer.name))
        self.cell(60, 4, _latin1(self.footer_label), align="C")
        self.cell(60, 4, _latin1(self.issuer.email), align="R")
        self.set_xy(15, 288)
        self.cell(60, 4, _latin1(f"SIRET: {self.issuer.siret}" if self.issuer.siret else ""))
        self.cell(60, 4, f"Page {self.page_no()} / {{nb}}", align="C")
        self.cell(60, 4, _latin1(self.issuer.phone), align="R")


class DocumentRenderer:
    """Fills document templates for a client and lays them out."""

    def __init__(self, issuer: DocumentIssuer | None = None, now: datetime | None = None):
        """Initialize renderer.

        Args:
            issuer: Identity printed on documents (defaults to environment configuration)
            now: Fixed rendering time, for reproducible output
        """
        self.issuer = issuer or DocumentIssuer.from_env()
        self.now = now or datetime.now()

    def render(self, doc_type: str, template: PdfTemplate, client: dict[str, Any]) -> RenderedDocument:
        """Fill a PDF template for a camelCase client record."""
        variables = build_variables(client, self.now)
        return RenderedDocument(
            type=doc_type,
            name=template.name,
            content=render_template(template.content, variables),
            number=variables["documentNumber"],
        )

    def filename(self, doc_type: str, client: dict[str, Any]) -> str:
        return document_filename(doc_type, client.get("clientName") or "", self.now)

    def build_email(
        self, doc_type: str, template: EmailTemplate, client: dict[str, Any]
    ) -> dict[str, str]:
        """Prepare an email for the document, ready to open as a ``mailto:`` link.

        ``mailto:`` cannot carry attachments, so the body ends with a note naming
        the PDF the user has to attach by hand.
        """
        variables = build_variables(client, self.now)
        subject = spell_out_euro(render_template(template.subject, variables))
        body = spell_out_euro(render_template(template.body, variables))
        filename = self.filename(doc_type, client)
        body += ATTACHMENT_NOTE.format(filename=filename)

        recipient = client.get("email") or ""
        mailto = (
            f"mailto:{recipient}"
            f"?subject={quote(subject, safe=_URI_SAFE)}"
            f"&body={quote(body, safe=_URI_SAFE)}"
        )
        return {
            "to": recipient,
            "subject": subject,
            "body": body,
            "filename": filename,
            "mailto": mailto,
        }

    def build_pdf(self, document: RenderedDocument, client: dict[str, Any]) -> bytes:
        """Lay out a rendered document as an A4 PDF."""
        title = document.name.upper()
        pdf = _DocumentPDF(self.issuer, f"{title} N° {document.number}")
        pdf.add_page()

        self._draw_header(pdf, title, document.number)
        self._draw_party(
            pdf,
            15,
            "CLIENT",
            client.get("clientName") or "",
            [
                f"Att: {client['contactPerson']}" if client.get("contactPerson") else "",
                client.get("company") or "",
                client.get("email") or "",
                client.get("phone") or "",
            ],
        )
        self._draw_party(
            pdf,
            110,
            "PRESTATAIRE",
            self.issuer.name,
            [
                self.issuer.title,
                self.issuer.address,
                self.issuer.city,
                " | ".join(part for part in (self.issuer.email, self.issuer.phone) if part),
            ],
        )

        pdf.set_text_color(*PRIMARY_COLOR)
        pdf.set_font("Helvetica", "B", 22)
        pdf.set_xy(15, 86)
        pdf.cell(180, 10, _latin1(title), align="C")
        pdf.set_draw_color(*ACCENT_COLOR)
        pdf.set_line_width(1)
        pdf.line(15, 97, 195, 97)

        pdf.set_text_color(0, 0, 0)
        pdf.set_xy(15, 103)
        self._draw_content(pdf, document.content)
        self._draw_legal(pdf)

        if document.type in SIGNED_DOCUMENT_TYPES:
            self._draw_signatures(pdf)

        logger.info(
            "document_rendered",
            document_type=document.type,
            document_number=document.number,
            pages=pdf.page_no(),
        )
        return bytes(pdf.output())

    def _draw_header(self, pdf: FPDF, title: str, number: str) -> None:
        pdf.set_fill_color(*PRIMARY_COLOR)
        pdf.rect(0, 0, 210, 38, style="F")
        pdf.set_text_color(255, 255, 255)

        pdf.set_xy(15, 8)
        pdf.set_font("Helvetica", "B", 18)
        pdf.cell(95, 8, _latin1(self.issuer.name))
        pdf.set_xy(15, 18)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(95, 5, _latin1(self.issuer.tagline))
        if self.issuer.siret:
            pdf.set_xy(15, 25)
            pdf.set_font("Helvetica", "", 8)
            pdf.cell(95, 5, _latin1(f"SIRET: {self.issuer.siret}"))

        validity = self.now + timedelta(days=QUOTE_VALIDITY_DAYS)
        right_lines = (
            ("B", 11, title),
            ("", 9, f"N° {number}"),
            ("", 9, f"Date: {self.now.strftime('%d/%m/%Y')}"),
            ("", 9, f"Valide jusqu'au: {validity.strftime('%d/%m/%Y')}"),
        )
        y = 8
        for style, size, text in right_lines:
            pdf.set_xy(110, y)
            pdf.set_font("Helvetica", style, size)
            pdf.cell(85, 5, _latin1(text), align="R")
            y += 6

    def _draw_party(self, pdf: FPDF, x: float, label: str, name: str, lines: list[str]) -> None:
        pdf.set_fill_color(*LIGHT_GRAY)
        pdf.set_draw_color(*BORDER_COLOR)
        pdf.set_line_width(0.5)
        pdf.rect(x, 45, 85, 35, style="DF")

        pdf.set_text_color(*ACCENT_COLOR)
        pdf.set_font("Helvetica", "B", 9)
        pdf.set_xy(x + 3, 47)
        pdf.cell(79, 4, label)

        pdf.set_text_color(0, 0, 0)
        pdf.set_font("Helvetica", "B", 10)
        pdf.set_xy(x + 3, 52)
        pdf.cell(79, 5, _latin1(name))

        pdf.set_font("Helvetica", "", 9)
        y = 58
        for line in lines:
            if not line:
                continue
            pdf.set_xy(x + 3, y)
            pdf.cell(79, 4, _latin1(line))
            y += 5

    def _draw_content(self, pdf: FPDF, content: str) -> None:
        pdf.set_font("Helvetica", "", 10)
        for line in content.split("\n"):
            if SECTION_MARKER in line:
                y = pdf.get_y() + 2
                pdf.set_draw_color(*ACCENT_COLOR)
                pdf.set_line_width(0.5)
                pdf.line(15, y, 195, y)
                pdf.ln(5)
            elif not line.strip():
                pdf.ln(4)
            else:
                pdf.multi_cell(0, 6, _latin1(line), new_x="LMARGIN", new_y="NEXT")

    def _draw_legal(self, pdf: FPDF) -> None:
        pdf.ln(6)
        pdf.set_font("Helvetica", "B", 9)
        pdf.set_text_color(*PRIMARY_COLOR)
        pdf.cell(0, 5, _latin1("CONDITIONS GÉNÉRALES"), new_x="LMARGIN", new_y="NEXT")

        pdf.set_font("Helvetica", "", 8)
        pdf.set_text_color(60, 60, 60)
        for mention in LEGAL_MENTIONS:
            pdf.multi_cell(0, 4, _latin1(mention), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)

    def _draw_signatures(self, pdf: FPDF) -> None:
        if pdf.get_y() > 240:
            pdf.add_page()
        y = pdf.get_y() + 10

        pdf.set_draw_color(*BORDER_COLOR)
        pdf.set_line_width(0.5)
        boxes = (
            (15, "Signature du client", ('Précédée de "Bon pour accord"', "Date et signature :")),
            (110, f"Signature {self.issuer.name}", (self.issuer.signatory, "")),
        )
        for x, heading, notes in boxes:
            pdf.rect(x, y, 85, 30)
            pdf.set_xy(x + 3, y + 2)
            pdf.set_font("Helvetica", "B", 9)
            pdf.cell(79, 4, _latin1(heading))
            pdf.set_font("Helvetica", "", 7)
            for offset, note in enumerate(notes):
                if note:
                    pdf.set_xy(x + 3, y + 8 + offset * 5)
                    pdf.cell(79, 4, _latin1(note))
        pdf.set_y(y + 32)

