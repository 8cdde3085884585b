"""
Database seeding script for development data.

Provisions an ADMIN and two regular profiles (with signup bonus), adds a
few skills, and prints bearer tokens for local testing.
Run this script after database is set up but before first use.
"""

import asyncio
import sys
import uuid
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select, update

from backend.app.core.jwt import create_access_token
from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.main import app  # noqa: F401  registers all models
from backend.app.models.enums import ProfileRole
from backend.app.models.profile import Profile
from backend.app.models.skill import DifficultyLevel, Skill
from backend.app.schemas.auth import IdentityClaims
from backend.app.services.provisioning import ProvisioningService

# Stable ids so re-running the script hits the same profiles
SEED_NAMESPACE = uuid.UUID("6f1c2b1e-0d7a-4c55-9f0e-3a1d2c4b5e6f")

SEED_PROFILES = [
    ("admin@skillswap.dev", "Site Admin", ProfileRole.ADMIN),
    ("tess@skillswap.dev", "Tess Teacher", ProfileRole.USER),
    ("leo@skillswap.dev", "Leo Learner", ProfileRole.USER),
]

SEED_SKILLS = [
    ("tess@skillswap.dev", "Guitar basics", "music", 20, 2, DifficultyLevel.BEGINNER),
    ("tess@skillswap.dev", "Python for data analysis", "programming", 35, 3, DifficultyLevel.INTERMEDIATE),
]


async def seed_data():
    """
    Seed development profiles and skills.

    Creates:
    - 1 ADMIN profile
    - 2 USER profiles (one teaching two skills)
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    tokens = {}

    async with AsyncSessionLocal() as db:
        print("🌱 Starting data seeding...")

        profiles = {}
        for email, full_name, role in SEED_PROFILES:
            identity = IdentityClaims(id=uuid.uuid5(SEED_NAMESPACE, email), email=email, full_name=full_name)
            profile, created = await ProvisioningService.provision(db, identity)

            if role != ProfileRole.USER and profile.role != role:
                await db.execute(update(Profile).where(Profile.id == profile.id).values(role=role))
                await db.commit()

            profiles[email] = profile
            tokens[email] = create_access_token(data={"sub": str(profile.id), "email": email})
            print(f"{'✅ Created' if created else 'ℹ️  Found'} {role.value} profile {email}")

        for owner_email, title, category, price, max_hours, level in SEED_SKILLS:
            owner = profiles[owner_email]
            result = await db.execute(
                select(Skill).where(Skill.user_id == owner.id, Skill.title == title)
            )
            if result.scalar_one_or_none():
                continue

            db.add(Skill(
                user_id=owner.id,
                title=title,
                category=category,
                credits_per_hour=price,
                max_duration_hours=max_hours,
                difficulty_level=level
            ))
            print(f"✅ Created skill '{title}' ({price} credits/hour)")

        await db.commit()

    print("\n🎉 Data seeding completed successfully!")
    print("\nDevelopment bearer tokens:")
    for email, token in tokens.items():
        print(f"  - {email}: {token}")


if __name__ == "__main__":
    asyncio.run(seed_data())
