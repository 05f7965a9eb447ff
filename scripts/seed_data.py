#!/usr/bin/env python3
"""
Seed script to populate the project service database with sample projects and bids
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'services', 'project_service'))

from loguru import logger

from crud import create_bid, create_project, override_project_status, select_bid
from database import SessionLocal, init_db
from log import configure_logger
from models import ProjectStatus


PROJECTS = [
    {
        "customer_id": 1,
        "title": "Fence install",
        "description": "Replace 40m of timber fence around the back garden",
        "category_id": "fencing",
        "status": ProjectStatus.IN_BIDDING,
        "bids": [(10, 1000, 5, "Can start next week"), (11, 1200, 4, None)],
    },
    {
        "customer_id": 1,
        "title": "Kitchen tiling",
        "description": "Wall tiles behind the worktop, about 6 square metres",
        "category_id": "tiling",
        "status": ProjectStatus.PUBLISHED,
        "bids": [(12, 450, 2, "Tiles supplied by customer")],
    },
    {
        "customer_id": 2,
        "title": "Roof inspection",
        "description": "Inspect and report on a slate roof after the storm",
        "category_id": "roofing",
        "status": ProjectStatus.DRAFT,
        "bids": [],
    },
    {
        "customer_id": 2,
        "title": "Driveway paving",
        "description": "Block paving for a two-car driveway",
        "category_id": "paving",
        "status": ProjectStatus.IN_BIDDING,
        "bids": [(10, 5200, 10, None), (11, 4800, 12, "Includes drainage channel")],
        "select": 1,
    },
]


def seed_projects():
    init_db()
    db = SessionLocal()
    try:
        for spec in PROJECTS:
            project = create_project(
                db,
                spec["customer_id"],
                title=spec["title"],
                description=spec["description"],
                category_id=spec["category_id"],
            )
            if spec["status"] != ProjectStatus.DRAFT:
                project = override_project_status(db, project.id, spec["status"])

            bids = [
                create_bid(db, project.id, merchant_id, price=price, days=days, message=message)
                for merchant_id, price, days, message in spec["bids"]
            ]
            if "select" in spec:
                select_bid(db, project, bids[spec["select"]].id)

            logger.info(f"Seeded project '{spec['title']}' with {len(bids)} bids")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logger()
    seed_projects()
    logger.info("Seed data created successfully!")
