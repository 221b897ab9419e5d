"""Seed the data directory with a demo documentation project."""

from __future__ import annotations

import logging

from ..models.project import Project
from .config import AppConfig, get_config
from .database import init_database
from .project_store import ProjectStore

logger = logging.getLogger(__name__)

DEMO_PROJECT_ID = "demo-project"

# Demo pages with wikilinks, asset references and canvas blocks
DEMO_PAGES = [
    {
        "id": "guard-ai",
        "title": "Guard AI",
        "slug": "guard-ai",
        "category": "NPC",
        "tags": ["Actor", "AI"],
        "markdownBody": """# Guard AI

The guard actor [[Blueprint'/Game/NPC/BP_Guard.BP_Guard']] walks the route
described in [[Patrol Routes]] and hands off to the [[Combat System]] when it
spots the player.

Behaviour tree: [[BehaviorTree'/Game/NPC/AI/BT_Guard.BT_Guard']]""",
        "viewMode": "document",
        "metadata": {
            "status": "verified",
            "owner": "gameplay",
            "documentsAsset": "Blueprint'/Game/NPC/BP_Guard.BP_Guard'",
        },
    },
    {
        "id": "patrol-routes",
        "title": "Patrol Routes",
        "slug": "patrol-routes",
        "category": "NPC",
        "tags": ["AI", "Level Design"],
        "markdownBody": """# Patrol Routes

Spline actors placed in [[World'/Game/Maps/Courtyard.Courtyard']] define the
loops followed by [[Guard AI]].""",
        "viewMode": "document",
        "metadata": {"status": "review"},
    },
    {
        "id": "combat-system",
        "title": "Combat System",
        "slug": "combat-system",
        "category": "Gameplay",
        "tags": ["Combat"],
        "markdownBody": "",
        "viewMode": "canvas",
        "blocks": [
            {
                "id": "combat-intro",
                "type": "text",
                "x": 40,
                "y": 40,
                "width": 320,
                "height": 120,
                "content": "Damage is routed through the weapon component.",
            },
            {
                "id": "combat-weapon",
                "type": "asset",
                "x": 40,
                "y": 200,
                "width": 320,
                "height": 80,
                "content": {"reference": "Blueprint'/Game/Weapons/BP_Rifle.BP_Rifle'"},
            },
            {
                "id": "combat-guard-link",
                "type": "link",
                "x": 400,
                "y": 200,
                "width": 200,
                "height": 60,
                "content": {"pageId": "guard-ai", "title": "Guard AI"},
            },
            {
                "id": "combat-steps",
                "type": "steps",
                "x": 40,
                "y": 320,
                "width": 320,
                "height": 140,
                "content": ["Trace from muzzle", "Apply damage", "Play hit reaction"],
            },
        ],
        "edges": [
            {"id": "combat-edge-1", "source": "combat-intro", "target": "combat-weapon"},
        ],
        "metadata": {"status": "draft"},
    },
    {
        "id": "getting-started",
        "title": "Getting Started",
        "slug": "getting-started",
        "category": "General",
        "tags": ["Guide"],
        "markdownBody": """# Getting Started

Pages link with `[[Page Title]]`; assets link with their copied reference,
for example `[[Blueprint'/Game/NPC/BP_Guard.BP_Guard']]`.

Start with [[Guard AI]].""",
        "viewMode": "document",
        "metadata": {},
    },
]


def demo_project() -> Project:
    """Build the demo project with its folder tree."""
    return Project.model_validate(
        {
            "id": DEMO_PROJECT_ID,
            "name": "Demo Unreal Project",
            "pages": {page["id"]: page for page in DEMO_PAGES},
            "structure": [
                {
                    "id": "folder-npc",
                    "name": "NPC",
                    "type": "folder",
                    "isOpen": True,
                    "children": [
                        {"id": "node-guard-ai", "name": "Guard AI", "type": "page", "pageId": "guard-ai"},
                        {
                            "id": "node-patrol-routes",
                            "name": "Patrol Routes",
                            "type": "page",
                            "pageId": "patrol-routes",
                        },
                    ],
                },
                {"id": "node-combat", "name": "Combat System", "type": "page", "pageId": "combat-system"},
                {
                    "id": "node-getting-started",
                    "name": "Getting Started",
                    "type": "page",
                    "pageId": "getting-started",
                },
            ],
        }
    )


def seed_demo_project(store: ProjectStore | None = None) -> bool:
    """
    Write the demo project when the store holds no projects.

    Returns True if the demo project was created.
    """
    store = store or ProjectStore()
    existing = store.list_projects()
    if existing:
        logger.info(
            "Project store already populated; skipping demo project",
            extra={"project_count": len(existing)},
        )
        return False

    store.upsert_project(demo_project())
    logger.info("Created demo project", extra={"project_id": DEMO_PROJECT_ID})
    return True


def init_and_seed(config: AppConfig | None = None) -> None:
    """
    Initialize the layout database and seed the demo project.

    This is called on application startup so a fresh data directory always
    has something to render.
    """
    config = config or get_config()
    logger.info("Initializing database and seeding demo project...")

    db_path = init_database(config.layout_db_path)
    logger.info(f"Database initialized at: {db_path}")

    created = seed_demo_project(ProjectStore(config))
    logger.info(f"Initialization complete. Demo project created: {created}")


__all__ = ["DEMO_PROJECT_ID", "demo_project", "seed_demo_project", "init_and_seed"]
