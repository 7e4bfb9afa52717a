"""Populate an empty database with sample clients and default settings.

Usage:
    python -m mirotrak.seed

Rows that already exist (same client name, setting key or prompt title) are
left untouched, so the command can be run repeatedly.
"""

import asyncio
import json
import os

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mirotrak.api.middleware.logging import setup_logging
from mirotrak.models.clients import ClientDB
from mirotrak.models.library import PromptDB
from mirotrak.models.settings import EMAIL_TEMPLATES_KEY, PDF_TEMPLATES_KEY, SettingDB
from mirotrak.services.database import initialize_database, shutdown_database
from mirotrak.services.settings_store import (
    EMAIL_TEMPLATES_DESCRIPTION,
    JSON_SETTING_TYPE,
    PDF_TEMPLATES_DESCRIPTION,
)

logger = structlog.get_logger(__name__)

RULE = "━" * 36

SAMPLE_CLIENTS = [
    {
        "client_name": "TechCorp Solutions",
        "contact_person": "Marie Dubois",
        "email": "marie.dubois@techcorp.example",
        "phone": "+33 1 23 45 67 89",
        "company": "TechCorp",
        "address": "15 Avenue des Champs-Élysées",
        "city": "Paris",
        "postal_code": "75008",
        "country": "France",
        "project_type": "Application Web",
        "technologies": "React, Node.js, PostgreSQL",
        "budget": 50000,
        "status": "En cours",
        "progress": 65,
        "notes": "Client prioritaire - Deadline fin décembre",
        "website": "https://techcorp.example",
    },
    {
        "client_name": "InnoTech SARL",
        "contact_person": "Pierre Martin",
        "email": "p.martin@innotech.example",
        "phone": "+33 2 34 56 78 90",
        "company": "InnoTech",
        "address": "42 Rue de la République",
        "city": "Lyon",
        "postal_code": "69002",
        "country": "France",
        "project_type": "E-commerce",
        "technologies": "Vue.js, Express, MongoDB",
        "budget": 35000,
        "status": "En attente",
        "progress": 30,
        "notes": "En attente de validation client",
        "website": "https://innotech.example",
    },
    {
        "client_name": "Digital Agency Pro",
        "contact_person": "Sophie Laurent",
        "email": "sophie@digitalpro.example",
        "phone": "+33 3 45 67 89 01",
        "company": "Digital Pro",
        "address": "8 Boulevard Haussmann",
        "city": "Marseille",
        "postal_code": "13001",
        "country": "France",
        "project_type": "Application Mobile",
        "technologies": "React Native, Firebase",
        "budget": 42000,
        "status": "Terminé",
        "progress": 100,
        "website": "https://digitalpro.example",
    },
]

PDF_TEMPLATES = {
    "devis": {
        "name": "Devis",
        "content": f"""DEVIS N° {{{{documentNumber}}}}
Date: {{{{currentDate}}}}

CLIENT
{RULE}
{{{{clientName}}}}
Contact: {{{{contactPerson}}}}
Email: {{{{email}}}}
Tel: {{{{phone}}}}

PROJET
{RULE}
Type: {{{{projectType}}}}
Technologies: {{{{technologies}}}}
Début prévu: {{{{startDate}}}}
Échéance: {{{{endDate}}}}

MONTANT
{RULE}
Total HT: {{{{budget}}}} €
TVA (20%): {{{{budgetTVA}}}} €
Total TTC: {{{{budgetTTC}}}} €

Conditions de paiement:
- 30% à la commande
- 40% en cours de développement
- 30% à la livraison

Validité du devis: 30 jours""",
        "enabled": True,
    },
    "rapport": {
        "name": "Rapport d'avancement",
        "content": f"""RAPPORT D'AVANCEMENT
{{{{clientName}}}}
{RULE}

Statut: {{{{status}}}}
Progression: {{{{progress}}}}%

OBJECTIFS DU PROJET
{RULE}
Type: {{{{projectType}}}}
Technologies: {{{{technologies}}}}
Début: {{{{startDate}}}}
Échéance: {{{{endDate}}}}

NOTES
{RULE}
{{{{notes}}}}

Date du rapport: {{{{currentDate}}}}""",
        "enabled": True,
    },
    "facture": {
        "name": "Facture",
        "content": f"""FACTURE N° {{{{documentNumber}}}}
Date: {{{{currentDate}}}}

CLIENT
{RULE}
{{{{clientName}}}}
{{{{company}}}}
{{{{address}}}}
{{{{postalCode}}}} {{{{city}}}}
{{{{country}}}}

PRESTATIONS
{RULE}
Développement {{{{projectType}}}}
Technologies: {{{{technologies}}}}
Période: du {{{{startDate}}}} au {{{{endDate}}}}

MONTANT
{RULE}
Total HT: {{{{budget}}}} €
TVA (20%): {{{{budgetTVA}}}} €
Total TTC: {{{{budgetTTC}}}} €

Paiement: À réception de facture
Mode de paiement: Virement bancaire""",
        "enabled": True,
    },
}

EMAIL_TEMPLATES = {
    "devis": {
        "subject": "Devis pour votre projet {{projectType}}",
        "body": (
            "Bonjour {{contactPerson}},\n\n"
            "Veuillez trouver ci-joint le devis pour votre projet {{projectType}}.\n\n"
            "Le montant total s'élève à {{budgetTTC}} € TTC.\n\n"
            "N'hésitez pas à me contacter si vous avez des questions.\n\n"
            "Cordialement"
        ),
    },
    "rapport": {
        "subject": "Rapport d'avancement - {{projectType}}",
        "body": (
            "Bonjour {{contactPerson}},\n\n"
            "Voici le rapport d'avancement de votre projet.\n\n"
            "Progression actuelle: {{progress}}%\n"
            "Statut: {{status}}\n\n"
            "Cordialement"
        ),
    },
    "facture": {
        "subject": "Facture N° {{documentNumber}} - {{projectType}}",
        "body": (
            "Bonjour {{contactPerson}},\n\n"
            "Veuillez trouver ci-joint la facture pour les prestations réalisées.\n\n"
            "Montant total: {{budgetTTC}} € TTC\n\n"
            "Merci de procéder au règlement selon les modalités convenues.\n\n"
            "Cordialement"
        ),
    },
}

DEFAULT_SETTINGS = [
    {
        "key": "visible_columns",
        "value": ["clientName", "contactPerson", "email", "phone", "projectType", "budget"],
        "description": "Colonnes visibles dans la grille",
    },
    {
        "key": "custom_links",
        "value": [
            {
                "id": "1",
                "name": "GitHub",
                "url": "https://github.com",
                "icon": "https://github.githubassets.com/favicons/favicon.svg",
                "category": "Développement",
            },
            {
                "id": "2",
                "name": "Google Drive",
                "url": "https://drive.google.com",
                "icon": "https://ssl.gstatic.com/docs/doclist/images/drive_2022q3_32dp.png",
                "category": "Stockage",
            },
        ],
        "description": "Liens personnalisés de la sidebar",
    },
    {
        "key": PDF_TEMPLATES_KEY,
        "value": PDF_TEMPLATES,
        "description": PDF_TEMPLATES_DESCRIPTION,
    },
    {
        "key": EMAIL_TEMPLATES_KEY,
        "value": EMAIL_TEMPLATES,
        "description": EMAIL_TEMPLATES_DESCRIPTION,
    },
]

DEFAULT_PROMPTS = [
    {
        "title": "Email de bienvenue client",
        "category": "Marketing",
        "content": (
            "Objet : Bienvenue chez [NOM_ENTREPRISE] !\n\n"
            "Bonjour [NOM_CLIENT],\n\n"
            "Votre projet [NOM_PROJET] est maintenant lancé.\n\n"
            "Prochaines étapes :\n"
            "- Réunion de lancement : [DATE]\n"
            "- Premier livrable : [DATE]\n\n"
            "Cordialement,\nL'équipe [NOM_ENTREPRISE]"
        ),
    },
    {
        "title": "Email de relance prospect",
        "category": "Marketing",
        "content": (
            "Objet : Suite à notre échange - Proposition pour [NOM_PROJET]\n\n"
            "Bonjour [NOM_PROSPECT],\n\n"
            "Je me permets de revenir vers vous concernant votre projet [NOM_PROJET].\n"
            "Avez-vous eu l'occasion de consulter notre proposition ?"
        ),
    },
]


async def seed_database(db: AsyncSession) -> dict[str, int]:
    """Insert the sample rows that are not present yet.

    Args:
        db: Database session; committed on success

    Returns:
        Number of inserted rows per table
    """
    inserted = {"clients": 0, "settings": 0, "prompts": 0}

    for data in SAMPLE_CLIENTS:
        existing = await db.scalar(
            select(ClientDB.id).where(ClientDB.client_name == data["client_name"])
        )
        if existing is None:
            db.add(ClientDB(**data))
            inserted["clients"] += 1

    for data in DEFAULT_SETTINGS:
        existing = await db.scalar(select(SettingDB.id).where(SettingDB.key == data["key"]))
        if existing is None:
            db.add(
                SettingDB(
                    key=data["key"],
                    value=json.dumps(data["value"], ensure_ascii=False),
                    type=JSON_SETTING_TYPE,
                    description=data["description"],
                )
            )
            inserted["settings"] += 1

    for data in DEFAULT_PROMPTS:
        existing = await db.scalar(select(PromptDB.id).where(PromptDB.title == data["title"]))
        if existing is None:
            db.add(PromptDB(**data))
            inserted["prompts"] += 1

    await db.commit()
    logger.info("database_seeded", inserted=inserted)
    return inserted


async def main() -> None:
    setup_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "console"),
    )

    db_manager = initialize_database()
    await db_manager.initialize_async()
    try:
        await db_manager.create_tables()
        async with db_manager.get_async_session() as session:
            await seed_database(session)
    finally:
        await shutdown_database()


if __name__ == "__main__":
    asyncio.run(main())
