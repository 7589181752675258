"""Setup configuration for mcp-workflow package."""

from setuptools import setup, find_packages

setup(
    name="mcp-workflow",
    version="0.1.0",
    description="Resumable LangGraph workflows orchestrated through MCP tool calls",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "langchain-core>=0.3.0",
        "langgraph>=0.4.0",
        "langgraph-checkpoint>=2.0.0",
        "mcp>=1.12.0,<2",
        "aiosqlite>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.11.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "black>=23.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mcp-workflow=mcp_workflow.main:main",
        ],
    },
)
