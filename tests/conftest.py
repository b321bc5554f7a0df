import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cleanmarket.auth import create_access_token  # noqa: E402
from cleanmarket.database import Base, get_db  # noqa: E402
from cleanmarket.main import app  # noqa: E402
from cleanmarket.models import (  # noqa: E402
    Appointment,
    BusinessEmployee,
    EmployeeJobAssignment,
    User,
    UserHome,
)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(account_type="homeowner", first_name=None, last_name=None, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=kwargs.pop("username", f"user{n}"),
            email=kwargs.pop("email", f"user{n}@example.com"),
            first_name=first_name,
            last_name=last_name,
            account_type=account_type,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_home(db):
    def _make_home(owner, nick_name=None, address="123 Main St"):
        home = UserHome(user_id=owner.id, nick_name=nick_name, address=address, city="Springfield")
        db.add(home)
        db.commit()
        db.refresh(home)
        return home

    return _make_home


@pytest.fixture
def make_appointment(db):
    def _make_appointment(homeowner, home=None, workers=(), completed=True, cancelled=False):
        appointment = Appointment(
            user_id=homeowner.id,
            home_id=home.id if home else None,
            employees_assigned=[str(w.id) if isinstance(w, User) else str(w) for w in workers],
            completed=completed,
            cancelled=cancelled,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture
def make_employee(db):
    def _make_employee(business_owner, user=None, status="active"):
        employee = BusinessEmployee(
            business_owner_id=business_owner.id,
            user_id=user.id if user else None,
            status=status,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make_employee


@pytest.fixture
def assign(db):
    def _assign(appointment, employee, status="assigned"):
        assignment = EmployeeJobAssignment(
            appointment_id=appointment.id,
            business_employee_id=employee.id,
            business_owner_id=employee.business_owner_id,
            status=status,
        )
        db.add(assignment)
        db.commit()
        return assignment

    return _assign


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
