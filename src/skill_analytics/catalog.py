# ABOUTME: Searches generated quizzes and the merge requests they were generated from.
# ABOUTME: Merge request results carry a per-repository count summary.

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict

from src.event_store.base import EventStore, MergeRequestQuery, QuizQuery

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50


def query_quizzes(store: EventStore, query: QuizQuery) -> Dict:
    quizzes = store.query_quizzes(query)
    logger.info("query_quizzes completed", extra={"count": len(quizzes)})
    return {"count": len(quizzes), "quizzes": [q.to_dict() for q in quizzes]}


def search_merge_requests(store: EventStore, query: MergeRequestQuery) -> Dict:
    merge_requests = store.query_merge_requests(query)
    # Counter keeps first-seen order, i.e. newest repository first.
    per_repo = Counter(f"{mr.owner}/{mr.repo}" for mr in merge_requests)
    logger.info("search_merge_requests completed", extra={"count": len(merge_requests)})
    return {
        "count": len(merge_requests),
        "repositorySummary": [{"repository": repo, "count": count} for repo, count in per_repo.items()],
        "mergeRequests": [mr.to_dict() for mr in merge_requests],
    }
