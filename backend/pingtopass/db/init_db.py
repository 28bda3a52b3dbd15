#!/usr/bin/env python3
"""
Database initialisation script.

Creates every table and, with ``--seed``, loads a demo exam with objectives,
questions and a demo user so the API can be tried locally.

    python -m pingtopass.db.init_db --seed
"""

import argparse
import os

# Load environment variables before settings are imported
from dotenv import load_dotenv

if os.path.exists(".env"):
    load_dotenv(".env")
elif os.path.exists(".env.example"):
    load_dotenv(".env.example")

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from pingtopass.core.config import settings
from pingtopass.crud.crud_exam import exam as crud_exam, objective as crud_objective
from pingtopass.crud.crud_question import question as crud_question
from pingtopass.crud.crud_user import user as crud_user
from pingtopass.db.base_class import Base
from pingtopass.db.database import SessionLocal, engine as default_engine, transaction
import pingtopass.models  # noqa: F401  registers every table on Base
from pingtopass.models.exam import Exam
from pingtopass.schemas.exam import ExamCreate, ObjectiveCreate
from pingtopass.schemas.question import AnswerOption, QuestionCreate
from pingtopass.schemas.user import UserCreate

DEMO_EXAM = ExamCreate(
    vendor_id="comptia",
    code="N10-009",
    name="CompTIA Network+",
    description="Networking fundamentals, implementation, operations, security and troubleshooting.",
    passing_score=0.72,
    question_count=90,
    time_limit_minutes=90,
    difficulty_level=3,
)

DEMO_OBJECTIVES = [
    ("1.0", "Networking Concepts", 0.23),
    ("2.0", "Network Implementation", 0.20),
    ("3.0", "Network Operations", 0.19),
    ("4.0", "Network Security", 0.14),
    ("5.0", "Network Troubleshooting", 0.24),
]

# (objective code, difficulty, text, [(id, text, correct)], explanation)
DEMO_QUESTIONS = [
    ("1.0", 1, "Which OSI layer is responsible for logical addressing and routing?",
     [("a", "Data Link", False), ("b", "Network", True), ("c", "Transport", False), ("d", "Session", False)],
     "Layer 3, the Network layer, handles IP addressing and routing."),
    ("1.0", 2, "Which port does HTTPS use by default?",
     [("a", "80", False), ("b", "8080", False), ("c", "443", True), ("d", "22", False)],
     "HTTPS uses TCP port 443."),
    ("1.0", 3, "How many usable host addresses are in a /27 IPv4 subnet?",
     [("a", "30", True), ("b", "32", False), ("c", "62", False), ("d", "14", False)],
     "A /27 leaves 5 host bits: 2^5 - 2 = 30 usable hosts."),
    ("2.0", 2, "Which device forwards frames based on MAC addresses?",
     [("a", "Router", False), ("b", "Switch", True), ("c", "Hub", False), ("d", "Modem", False)],
     "Switches build a MAC address table and forward frames at Layer 2."),
    ("2.0", 3, "Which protocol prevents switching loops in a redundant Layer 2 topology?",
     [("a", "OSPF", False), ("b", "STP", True), ("c", "VRRP", False), ("d", "LACP", False)],
     "Spanning Tree Protocol blocks redundant paths to prevent loops."),
    ("3.0", 2, "Which protocol is used to synchronise clocks across network devices?",
     [("a", "SNMP", False), ("b", "NTP", True), ("c", "SMTP", False), ("d", "TFTP", False)],
     "Network Time Protocol keeps device clocks in sync."),
    ("3.0", 4, "Which SNMP version adds authentication and encryption?",
     [("a", "SNMPv1", False), ("b", "SNMPv2c", False), ("c", "SNMPv3", True), ("d", "SNMPv2", False)],
     "SNMPv3 introduced the user-based security model."),
    ("4.0", 3, "Which attack floods a switch's CAM table to force it to flood traffic?",
     [("a", "ARP poisoning", False), ("b", "MAC flooding", True), ("c", "VLAN hopping", False), ("d", "DNS spoofing", False)],
     "MAC flooding exhausts the CAM table so the switch behaves like a hub."),
    ("4.0", 4, "Which port security measure restricts a switch port to known MAC addresses?",
     [("a", "MAC filtering", True), ("b", "Port mirroring", False), ("c", "Jumbo frames", False), ("d", "PoE", False)],
     "MAC filtering only allows traffic from approved addresses."),
    ("5.0", 3, "A user can reach hosts by IP but not by name. What is the most likely cause?",
     [("a", "Faulty cable", False), ("b", "DNS misconfiguration", True), ("c", "Duplex mismatch", False), ("d", "Wrong VLAN", False)],
     "Working IP connectivity with failing name resolution points at DNS."),
]

DEMO_USER = UserCreate(email="student@pingtopass.local", name="Demo Student", provider="email")


def init_db(bind: Engine = default_engine) -> None:
    """Create all tables."""
    print(f"Using database URL: {settings.database_url.split('?')[0]}")
    Base.metadata.create_all(bind=bind)
    print("Database tables created.")


def seed_demo_data(db: Session) -> Exam:
    """Load the demo exam once; running it again returns the existing exam."""
    existing = (
        db.query(Exam)
        .filter(Exam.vendor_id == DEMO_EXAM.vendor_id, Exam.code == DEMO_EXAM.code)
        .first()
    )
    if existing is not None:
        print(f"Demo exam {existing.code} already present.")
        return existing

    with transaction(db):
        db_exam = crud_exam.create(db, obj_in=DEMO_EXAM, commit=False)
        objectives = {}
        for sort_order, (code, name, weight) in enumerate(DEMO_OBJECTIVES):
            objectives[code] = crud_objective.create(db, obj_in=ObjectiveCreate(
                exam_id=db_exam.id, code=code, name=name, weight=weight, sort_order=sort_order,
            ), commit=False)
        for code, difficulty, text, options, explanation in DEMO_QUESTIONS:
            crud_question.create(db, obj_in=QuestionCreate(
                exam_id=db_exam.id,
                objective_id=objectives[code].id,
                text=text,
                answers=[AnswerOption(id=i, text=t, is_correct=c) for i, t, c in options],
                explanation=explanation,
                difficulty=difficulty,
                review_status="approved",
            ), commit=False)
    crud_user.upsert_login(db, obj_in=DEMO_USER)
    print(f"Seeded {DEMO_EXAM.code} with {len(DEMO_OBJECTIVES)} objectives and {len(DEMO_QUESTIONS)} questions.")
    return db_exam


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the PingToPass database tables.")
    parser.add_argument("--seed", action="store_true", help="also load the demo exam and user")
    args = parser.parse_args()

    init_db()
    if args.seed:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()


if __name__ == "__main__":
    main()
