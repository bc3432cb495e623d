# ABOUTME: Seeds a demo learner account into the configured store for local exploration.
# ABOUTME: Writes a JSON fixture for the memory backend or replaces documents in MongoDB.

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console

from src.common.settings import load_settings
from src.event_store import Collections, InMemoryEventStore

console = Console()
app = typer.Typer(help="Seed or remove the demo learner account.")

DEMO_ACCOUNT_ID = "demo-learner"
DEFAULT_FIXTURE = Path("data/demo_store.json")

# Owner field used to find the account's documents in each collection.
ACCOUNT_FIELDS = {
    Collections.USERS: "accountId",
    Collections.USER_PROFILES: "accountId",
    Collections.QUIZZES: "accountId",
    Collections.ANSWERS: "accountId",
    Collections.MERGE_REQUESTS: "authorAccountId",
    Collections.SKILL_STATS: "accountId",
    Collections.GROWTH_MILESTONES: "accountId",
}

# (category, difficulty, correct) per answer, oldest first.
ANSWER_PLAN = [
    ("bug_fix", "easy", True),
    ("bug_fix", "easy", True),
    ("bug_fix", "medium", False),
    ("performance", "medium", True),
    ("performance", "medium", False),
    ("performance", "hard", False),
    ("refactoring", "easy", True),
    ("refactoring", "easy", True),
    ("refactoring", "medium", True),
    ("security", "hard", True),
    ("security", "hard", False),
    ("security", "medium", False),
    ("logic", "medium", True),
    ("logic", "medium", True),
    ("logic", "hard", True),
]

# category -> (averageDifficulty, weeklyTrend, monthlyTrend)
TREND_PLAN = {
    "bug_fix": (1.33, 0.1, 0.1),
    "performance": (2.33, -0.3, -0.2),
    "refactoring": (1.33, 0.5, 0.4),
    "security": (2.67, 0.0, 0.2),
    "logic": (2.33, 0.3, 0.3),
}


def build_demo_documents(
    account_id: str = DEMO_ACCOUNT_ID, now: Optional[datetime] = None, with_skill_stats: bool = True
) -> Dict[str, List[Dict]]:
    """
    Build one account's documents across every collection.

    Without skill stats the analytics fall back to the answer log.
    """
    now = now or datetime.now(timezone.utc)

    def days_ago(n: int) -> datetime:
        return now - timedelta(days=n)

    merge_requests = [
        {
            "mergeRequestId": f"github_demo-org_demo-repo_{number}",
            "platform": "github",
            "owner": "demo-org",
            "repo": "demo-repo",
            "number": number,
            "authorAccountId": account_id,
            "title": title,
            "diffSummary": summary,
            "filesChanged": files,
            "status": status,
            "createdAt": days_ago(age),
        }
        for number, title, summary, files, status, age in (
            (101, "feat: Add user authentication middleware", "Adds JWT auth middleware",
             ["src/middleware/auth.ts", "src/routes/api.ts"], "merged", 20),
            (102, "fix: Resolve N+1 query in user listing", "Batches user listing queries",
             ["src/services/userService.ts", "src/repositories/userRepo.ts"], "open", 5),
            (103, "refactor: Extract validation logic into shared module", "Moves validation to a shared module",
             ["src/utils/validation.ts", "src/controllers/userController.ts"], "merged", 10),
        )
    ]
    mr_by_category = {
        "bug_fix": merge_requests[0]["mergeRequestId"],
        "performance": merge_requests[1]["mergeRequestId"],
        "refactoring": merge_requests[2]["mergeRequestId"],
        "security": merge_requests[0]["mergeRequestId"],
        "logic": merge_requests[1]["mergeRequestId"],
    }

    quizzes = []
    for i, (category, difficulty, question) in enumerate(
        (
            ("bug_fix", "easy", "Which status code should the auth middleware return for an invalid token?"),
            ("performance", "medium", "What is the most appropriate fix for an N+1 query?"),
            ("refactoring", "easy", "Which principle matters most when extracting a shared module?"),
            ("security", "hard", "Which JWT signing algorithm avoids sharing a secret key?"),
            ("logic", "medium", "What does cursor pagination offer over offset pagination?"),
        )
    ):
        quizzes.append(
            {
                "quizId": str(uuid.uuid4()),
                "mergeRequestId": mr_by_category[category],
                "accountId": account_id,
                "questionText": question,
                "category": category,
                "difficulty": difficulty,
                "options": ["Option A", "Option B", "Option C", "Option D"],
                "correctAnswerIndex": 1,
                "explanation": "Option B is correct for the change under review.",
                "status": "answered",
                "createdAt": days_ago(15 - i),
            }
        )
    quiz_by_category = {q["category"]: q for q in quizzes}

    answers = []
    for i, (category, difficulty, correct) in enumerate(ANSWER_PLAN):
        quiz = quiz_by_category[category]
        answers.append(
            {
                "answerId": str(uuid.uuid4()),
                "quizId": quiz["quizId"],
                "accountId": account_id,
                "mergeRequestId": quiz["mergeRequestId"],
                "selectedAnswerIndex": quiz["correctAnswerIndex"] if correct else (quiz["correctAnswerIndex"] + 1) % 4,
                "isCorrect": correct,
                "category": category,
                "difficulty": difficulty,
                "answeredAt": days_ago(15 - i),
            }
        )

    skill_stats = []
    if with_skill_stats:
        for category, (avg_difficulty, weekly, monthly) in TREND_PLAN.items():
            rows = [a for a in answers if a["category"] == category]
            correct = sum(1 for a in rows if a["isCorrect"])
            skill_stats.append(
                {
                    "statId": str(uuid.uuid4()),
                    "accountId": account_id,
                    "category": category,
                    "totalQuizzes": len(rows),
                    "correctCount": correct,
                    "correctRate": round(correct / len(rows), 2),
                    "averageDifficulty": avg_difficulty,
                    "weeklyTrend": weekly,
                    "monthlyTrend": monthly,
                    "lastAnsweredAt": days_ago(1),
                    "calculatedAt": now,
                }
            )

    total_correct = sum(1 for a in answers if a["isCorrect"])
    return {
        Collections.USERS: [
            {
                "accountId": account_id,
                "platform": "github",
                "totalQuizzes": len(answers),
                "correctCount": total_correct,
                "createdAt": days_ago(30),
                "updatedAt": now,
            }
        ],
        Collections.USER_PROFILES: [
            {
                "accountId": account_id,
                "careerGoal": "Become a backend engineer with strong security skills",
                "experienceLevel": "mid",
                "yearsOfExperience": 3,
                "focusAreas": ["security", "performance"],
                "selfAssessment": {"bug_fix": 3, "performance": 2, "refactoring": 4, "security": 2, "logic": 3},
                "createdAt": days_ago(30),
                "updatedAt": now,
            }
        ],
        Collections.MERGE_REQUESTS: merge_requests,
        Collections.QUIZZES: quizzes,
        Collections.ANSWERS: answers,
        Collections.SKILL_STATS: skill_stats,
        Collections.GROWTH_MILESTONES: [
            {
                "milestoneId": str(uuid.uuid4()),
                "accountId": account_id,
                "type": "first_correct",
                "achievement": "First correct answer!",
                "achievedAt": days_ago(15),
                "metadata": {"quizId": quizzes[0]["quizId"]},
            },
            {
                "milestoneId": str(uuid.uuid4()),
                "accountId": account_id,
                "type": "total_milestone",
                "achievement": "Answered 10 quizzes",
                "achievedAt": days_ago(5),
                "metadata": {"total": 10},
            },
            {
                "milestoneId": str(uuid.uuid4()),
                "accountId": account_id,
                "type": "category_mastery",
                "category": "refactoring",
                "achievement": "Perfect score in refactoring",
                "achievedAt": days_ago(6),
                "metadata": {"correctRate": 1.0},
            },
        ],
    }


def _mongo_database(config: Optional[Path]):
    from pymongo import MongoClient

    settings = load_settings(config).store
    client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=settings.server_selection_timeout_ms)
    return client[settings.database]


def _cleanup_mongo(db, account_id: str) -> None:
    for collection, owner_field in ACCOUNT_FIELDS.items():
        deleted = db[collection].delete_many({owner_field: account_id}).deleted_count
        console.print(f"  {collection}: deleted {deleted} docs")


@app.command()
def seed(
    account_id: str = typer.Option(DEMO_ACCOUNT_ID, "--account-id", help="Account identifier to seed."),
    backend: str = typer.Option("memory", "--backend", help="memory (JSON fixture) or mongo."),
    output: Path = typer.Option(DEFAULT_FIXTURE, "--output", help="Fixture path for the memory backend."),
    without_skill_stats: bool = typer.Option(False, "--without-skill-stats", help="Skip aggregate records."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
) -> None:
    """
    Replace the account's documents with a fresh demo history.
    """
    documents = build_demo_documents(account_id, with_skill_stats=not without_skill_stats)

    if backend == "memory":
        InMemoryEventStore(documents).to_json(output)
        console.print(f"[green]Wrote demo fixture for {account_id} to {output}[/green]")
        return
    if backend != "mongo":
        console.print(f"[red]Unsupported backend '{backend}'.[/red]")
        raise typer.Exit(code=2)

    db = _mongo_database(config)
    _cleanup_mongo(db, account_id)
    for collection, docs in documents.items():
        if docs:
            db[collection].insert_many(docs)
        console.print(f"  {collection}: inserted {len(docs)} docs")
    console.print(f"[green]Seeded {account_id} into MongoDB[/green]")


@app.command()
def cleanup(
    account_id: str = typer.Option(DEMO_ACCOUNT_ID, "--account-id", help="Account identifier to remove."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
) -> None:
    """
    Remove the account's documents from MongoDB.
    """
    _cleanup_mongo(_mongo_database(config), account_id)
    console.print("[green]Cleanup complete[/green]")


if __name__ == "__main__":
    app()
