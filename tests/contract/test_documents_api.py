"""Contract tests for the document generation endpoints."""

import json

import pytest
from httpx import AsyncClient

from mirotrak.models.clients import ClientDB

PDF_TEMPLATES = {
    "devis": {
        "name": "Devis",
        "content": "DEVIS N° {{documentNumber}}\n━━━━━━\n{{clientName}}\nTotal TTC: {{budgetTTC}} €",
        "enabled": True,
    },
    "rapport": {"name": "Rapport", "content": "Progression: {{progress}}%", "enabled": False},
}

EMAIL_TEMPLATES = {
    "devis": {
        "subject": "Devis pour votre projet {{projectType}}",
        "body": "Bonjour {{contactPerson}},\nMontant: {{budgetTTC}} € TTC",
    }
}


@pytest.fixture
async def templates(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/settings/bulk",
        json={
            "settings": [
                {"key": "pdf_templates", "value": json.dumps(PDF_TEMPLATES), "type": "json"},
                {"key": "email_templates", "value": json.dumps(EMAIL_TEMPLATES), "type": "json"},
            ]
        },
    )
    assert response.status_code == 200


@pytest.mark.contract
@pytest.mark.usefixtures("templates")
class TestDocumentsContract:
    """Contract tests for /api/documents."""

    async def test_preview(self, api_client: AsyncClient, sample_client: ClientDB) -> None:
        response = await api_client.post(
            "/api/documents/devis/preview", json={"clientId": sample_client.id}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "devis"
        assert data["name"] == "Devis"
        assert "TechCorp Solutions" in data["content"]
        assert "Total TTC: 60000.00 €" in data["content"]
        assert "{{" not in data["content"]

    async def test_pdf_download(self, api_client: AsyncClient, sample_client: ClientDB) -> None:
        response = await api_client.post(
            "/api/documents/devis/pdf", json={"clientId": sample_client.id}
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="devis_TechCorp_Solutions_' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    async def test_email_draft(self, api_client: AsyncClient, sample_client: ClientDB) -> None:
        response = await api_client.post(
            "/api/documents/devis/email", json={"clientId": sample_client.id}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["to"] == "marie.dubois@techcorp.example"
        assert data["subject"] == "Devis pour votre projet Application Web"
        assert "60000.00 euros TTC" in data["body"]
        assert data["filename"] in data["body"]
        assert data["mailto"].startswith("mailto:marie.dubois@techcorp.example?subject=")

    @pytest.mark.parametrize(
        ("path", "client_id"),
        [
            ("/api/documents/contrat/preview", None),
            ("/api/documents/rapport/preview", None),
            ("/api/documents/rapport/email", None),
            ("/api/documents/devis/pdf", 999),
        ],
    )
    async def test_missing_template_or_client_is_404(
        self, api_client: AsyncClient, sample_client: ClientDB, path: str, client_id: int | None
    ) -> None:
        response = await api_client.post(path, json={"clientId": client_id or sample_client.id})

        assert response.status_code == 404
        assert "message" in response.json()


@pytest.mark.contract
class TestIncompleteTemplatesContract:
    """Stored templates missing required keys are treated as absent."""

    @pytest.fixture(autouse=True)
    async def incomplete_templates(self, api_client: AsyncClient) -> None:
        await api_client.post(
            "/api/settings/bulk",
            json={
                "settings": [
                    {
                        "key": "pdf_templates",
                        "value": json.dumps({"devis": {"name": "Devis"}}),
                        "type": "json",
                    },
                    {
                        "key": "email_templates",
                        "value": json.dumps({"devis": {"subject": "Devis"}}),
                        "type": "json",
                    },
                ]
            },
        )

    @pytest.mark.parametrize("action", ["preview", "pdf", "email"])
    async def test_incomplete_template_is_404(
        self, api_client: AsyncClient, sample_client: ClientDB, action: str
    ) -> None:
        response = await api_client.post(
            f"/api/documents/devis/{action}", json={"clientId": sample_client.id}
        )

        assert response.status_code == 404
