from setuptools import setup, find_packages

setup(
    name="skillbarter",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi<0.137",  # 0.137 wraps included routers; app.routes entries lose .path
        "uvicorn",
        "sqlalchemy",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<5",  # passlib reads bcrypt.__about__, removed in 5.x
        "python-multipart",
        "pydantic[email]",
        "pydantic-settings",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
