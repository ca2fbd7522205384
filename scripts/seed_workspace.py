#!/usr/bin/env python3
"""CLI script to seed a workspace with members and an optional space tree.

Usage:
    uv run python scripts/seed_workspace.py --name "Acme" --member "Ada Lovelace"
    uv run python scripts/seed_workspace.py --name "Acme" --member "Ada Lovelace" --member "Alan Turing" --spaces Docs,Design

Connects directly to the database using DATABASE_URL from environment or .env file.
Creates the tables if missing, then the workspace, its members, and one
top-level space per name in --spaces (owned by the first member).
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.atrium
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def seed(name: str, members: list[str], spaces: list[str]) -> None:
    """Create the workspace, members and spaces through the services."""
    from src.atrium.core.database import close_db, get_session_factory, init_db
    from src.atrium.resources.service import ResourceService
    from src.atrium.spaces.schemas import SpaceCreate
    from src.atrium.spaces.service import SpaceService
    from src.atrium.workspaces.repository import WorkspaceDirectory

    await init_db()
    session_factory = get_session_factory()
    directory = WorkspaceDirectory(session_factory)

    try:
        workspace = await directory.create_workspace(name)
        print(f"Workspace created: id={workspace.id} name={workspace.name}")

        created = []
        for full_name in members:
            first, _, last = full_name.partition(" ")
            member = await directory.add_member(workspace.id, first, last)
            created.append(member)
            print(f"  Member: {member.display_name()} ({member.id})")

        if spaces and created:
            space_service = SpaceService(session_factory, ResourceService(session_factory))
            for title in spaces:
                space = await space_service.create_space(
                    SpaceCreate(
                        workspace_id=workspace.id,
                        workspace_member_id=created[0].id,
                        title=title,
                    )
                )
                print(f"  Space: {title} path={space.resource.path} ({space.id})")
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a workspace")
    parser.add_argument("--name", required=True, help="Workspace name")
    parser.add_argument(
        "--member",
        action="append",
        default=[],
        help='Member full name, e.g. "Ada Lovelace" (repeatable)',
    )
    parser.add_argument(
        "--spaces",
        default="",
        help="Comma-separated titles of top-level spaces to create",
    )
    args = parser.parse_args()

    if args.spaces and not args.member:
        parser.error("--spaces needs at least one --member to own them")

    spaces = [s.strip() for s in args.spaces.split(",") if s.strip()]
    asyncio.run(seed(args.name, args.member, spaces))


if __name__ == "__main__":
    main()
