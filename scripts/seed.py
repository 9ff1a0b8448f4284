# scripts/seed.py
from datetime import date

from admission_portal.core.security import hash_password
from admission_portal.db.session import SessionLocal, engine, init_db
from admission_portal.models import Account, Program

USERS_TO_ENSURE = [
    # (name, email, password, role)
    ("Admin User", "admin@college.edu", "admin123", "admin"),
    ("Staff User", "staff@college.edu", "staff123", "staff"),
    ("Test Student", "student@example.com", "student123", "student"),
]

PROGRAMS_TO_ENSURE = [
    dict(
        name="Computer Science Engineering",
        description="B.Tech program in Computer Science Engineering focuses on the theoretical and practical aspects of computer science and its applications.",
        program_type="BTech", department="Computer Science", duration=4, seats=120,
        application_fee=1000, tuition_fee=125000, eligibility="Minimum 60% in 10+2 with PCM",
        application_deadline=date(2025, 6, 30), start_date=date(2025, 8, 1),
    ),
    dict(
        name="Electrical Engineering",
        description="B.Tech program in Electrical Engineering covers the study of electricity, electronics, and electromagnetism.",
        program_type="BTech", department="Electrical Engineering", duration=4, seats=100,
        application_fee=1000, tuition_fee=120000, eligibility="Minimum 60% in 10+2 with PCM",
        application_deadline=date(2025, 6, 30), start_date=date(2025, 8, 1),
    ),
    dict(
        name="Machine Learning & AI",
        description="M.Tech program in Machine Learning & AI focuses on advanced concepts and applications of artificial intelligence.",
        program_type="MTech", department="Computer Science", duration=2, seats=60,
        application_fee=1500, tuition_fee=150000, eligibility="B.Tech in CSE/IT/ECE with minimum 60%",
        application_deadline=date(2025, 6, 15), start_date=date(2025, 8, 1),
    ),
    dict(
        name="Computer Science PhD",
        description="Doctoral program in Computer Science for advanced research and academic excellence.",
        program_type="PhD", department="Computer Science", duration=3, seats=15,
        application_fee=2000, tuition_fee=100000, eligibility="M.Tech/M.E. in related field with minimum 65%",
        application_deadline=date(2025, 5, 31), start_date=date(2025, 8, 1),
    ),
    dict(
        name="Information Technology",
        description="Diploma program in Information Technology for entry-level IT professionals.",
        program_type="Diploma", department="Information Technology", duration=3, seats=80,
        application_fee=800, tuition_fee=75000, eligibility="Minimum 55% in 10th standard",
        application_deadline=date(2025, 6, 30), start_date=date(2025, 8, 1),
    ),
]

def upsert_user(db, name, email, password, role):
    u = db.query(Account).filter(Account.email == email).first()
    if u:
        u.password_hash = hash_password(password)
        u.role = role
        u.name = name
        return f"UPDATED {email}"
    db.add(Account(name=name, email=email, password_hash=hash_password(password), role=role))
    return f"CREATED {email}"

def ensure_program(db, data):
    if db.query(Program).filter(Program.name == data["name"]).first():
        return f"EXISTS {data['name']}"
    db.add(Program(status="Active", **data))
    return f"CREATED {data['name']}"

def main():
    init_db()
    print("DB =", engine.url.render_as_string(hide_password=True))
    db = SessionLocal()
    try:
        for (name, email, password, role) in USERS_TO_ENSURE:
            print(upsert_user(db, name, email, password, role))
        for data in PROGRAMS_TO_ENSURE:
            print(ensure_program(db, data))
        db.commit()
        users = db.query(Account).all()
        print("Users in DB:", [(x.email, x.role) for x in users])
    finally:
        db.close()

if __name__ == "__main__":
    main()
