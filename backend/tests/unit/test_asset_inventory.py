from pathlib import Path

from backend.src.models.project import DocPage
from backend.src.services.asset_inventory import (
    ContentFolderInventory,
    StaticAssetInventory,
    scan_broken_references,
    search_assets,
)
from backend.src.services.reference_parser import parse_asset_ref


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")


def test_content_folder_inventory_scans_assets_and_levels(tmp_path: Path) -> None:
    _touch(tmp_path / "Content" / "NPC" / "BP_Guard.uasset")
    _touch(tmp_path / "Content" / "Maps" / "Courtyard.umap")
    _touch(tmp_path / "Content" / "NPC" / "notes.txt")

    inventory = ContentFolderInventory(tmp_path)
    assets = inventory.list_assets()

    assert [asset.canonical for asset in assets] == [
        "Level'/Game/Maps/Courtyard.Courtyard'",
        "Asset'/Game/NPC/BP_Guard.BP_Guard'",
    ]


def test_content_folder_inventory_missing_content_dir(tmp_path: Path) -> None:
    inventory = ContentFolderInventory(tmp_path / "nope")

    assert inventory.list_assets() == []


def test_rescan_picks_up_new_files(tmp_path: Path) -> None:
    inventory = ContentFolderInventory(tmp_path)
    assert inventory.list_assets() == []

    _touch(tmp_path / "Content" / "BP_Top.uasset")

    assert inventory.list_assets() == []
    assert [asset.path for asset in inventory.rescan()] == ["/Game/BP_Top"]


def test_search_assets_matches_name_or_path() -> None:
    inventory = StaticAssetInventory(
        [
            parse_asset_ref("Blueprint'/Game/NPC/BP_Guard.BP_Guard'"),
            parse_asset_ref("StaticMesh'/Game/Props/SM_Crate.SM_Crate'"),
        ]
    )

    assert [asset.name for asset in search_assets(inventory, "guard")] == ["BP_Guard"]
    assert [asset.name for asset in search_assets(inventory, "/game/props")] == ["SM_Crate"]
    assert search_assets(inventory, "  ") == []
    assert len(search_assets(inventory, "game", limit=1)) == 1


def test_scan_broken_references_compares_identity() -> None:
    inventory = StaticAssetInventory([parse_asset_ref("Asset'/Game/NPC/BP_Guard.BP_Guard'")])
    pages = [
        DocPage(
            id="a",
            title="A",
            markdownBody=(
                "[[Blueprint'/Game/NPC/BP_Guard.BP_Guard']] "
                "[[Blueprint'/Game/NPC/BP_Gone.BP_Gone']] "
                "[[Blueprint'/Game/NPC/BP_Gone.BP_Gone']]"
            ),
        )
    ]

    assert scan_broken_references(pages, inventory) == ["Blueprint'/Game/NPC/BP_Gone.BP_Gone'"]
