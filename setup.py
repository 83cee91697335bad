from setuptools import setup, find_packages

setup(
    name="mentorlink",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<4.1",  # passlib reads bcrypt.__about__, removed in 4.1
        "pydantic[email]",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
        "tzdata",  # IANA zones for zoneinfo on hosts without a system database
    ],
    extras_require={
        "test": ["pytest"],
    },
)
