import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="cmcs-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'app.db')}")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP, "uploads"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["SEED_PASSWORD"] = ""

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from app.core.container import Services  # noqa: E402
from app.core.roles import Actor, UserRole  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import build_engine, build_session_factory  # noqa: E402
from app.services.upload_guard import UploadPolicy  # noqa: E402

STAFF_PASSWORD = "staff-pass"
LECTURER_PASSWORD = "lecturer-pass"

TEST_POLICY = UploadPolicy(
    max_bytes=1024,
    allowed_extensions=frozenset({".pdf", ".docx", ".xlsx"}),
)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'cmcs.db'}", lock_timeout=5)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def services(engine, tmp_path):
    return Services(
        build_session_factory(engine),
        upload_dir=str(tmp_path / "uploads"),
        upload_policy=TEST_POLICY,
        lock_timeout=5,
        default_hourly_rate=Decimal("350"),
    )


@pytest.fixture
def staff(services):
    services.users.seed_staff(
        STAFF_PASSWORD,
        [
            ("Cora Coordinator", "coordinator@cmcs.test", UserRole.coordinator),
            ("Max Manager", "manager@cmcs.test", UserRole.manager),
            ("Hana HR", "hr@cmcs.test", UserRole.hr),
        ],
    )
    return {
        role: Actor.from_user(services.user_store.find_one(role=role))
        for role in (UserRole.coordinator, UserRole.manager, UserRole.hr)
    }


@pytest.fixture
def hr(staff):
    return staff[UserRole.hr]


@pytest.fixture
def coordinator(staff):
    return staff[UserRole.coordinator]


@pytest.fixture
def manager(staff):
    return staff[UserRole.manager]


@pytest.fixture
def lecturer(services, hr):
    user = services.users.create_lecturer(
        hr,
        name="Lerato Lecturer",
        email="lerato@cmcs.test",
        password=LECTURER_PASSWORD,
        hourly_rate=Decimal("350"),
    )
    return Actor.from_user(user)


@pytest.fixture
def submit(services, lecturer):
    def _submit(hours=10, notes=None, uploads=(), actor=None):
        return services.claims.submit_claim(actor or lecturer, hours, notes=notes, uploads=uploads)

    return _submit
