"""
Unit tests for Reddit mention collection
"""

import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import Mock

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from factories import make_tool
from data.db import SQLiteDocumentStore
from data.tool_repository import ToolRepository
from schemas.domain import JobStatus
from services.enrichment.mention_collector import MentionCollector, RedditClient


def reddit_post(title, permalink="/r/AITools/comments/abc/post/"):
    return {"title": title, "selftext": "", "url": "", "permalink": permalink, "created_utc": 1718000000}


class TestRedditClient(unittest.TestCase):

    def test_requires_credentials(self):
        with self.assertRaises(ValueError):
            RedditClient("", "secret")

    def test_authenticates_then_lists_hot_posts(self):
        session = Mock(spec=requests.Session)
        session.post.return_value = Mock(ok=True, json=Mock(return_value={"access_token": "tok"}))
        session.get.return_value = Mock(json=Mock(return_value={
            "data": {"children": [{"data": {"title": "First"}}, {"data": {"title": "Second"}}]}
        }))

        posts = RedditClient("id", "secret", session=session).hot_posts("AITools", limit=2)

        self.assertEqual([p["title"] for p in posts], ["First", "Second"])
        headers = session.get.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer tok")

    def test_auth_failure_raises_connection_error(self):
        session = Mock(spec=requests.Session)
        session.post.return_value = Mock(ok=False, status_code=401, reason="Unauthorized")
        with self.assertRaises(ConnectionError):
            RedditClient("id", "secret", session=session).authenticate()


class TestMentionCollector(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = SQLiteDocumentStore(os.path.join(self.tmpdir, "test.db"))
        self.repository = ToolRepository(self.store)
        self.repository.save_tool(make_tool("suno", official_url="https://suno.com", mention_count=2))
        self.reddit = Mock()
        self.llm = Mock()

    def tearDown(self):
        self.store.close()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _collector(self, posts, replies):
        self.reddit.hot_posts.side_effect = [posts] + [[] for _ in range(20)]
        self.llm.messages.create.side_effect = [Mock(content=[Mock(text=reply)]) for reply in replies]
        return MentionCollector(self.repository, self.reddit, self.llm, delay_seconds=0)

    def test_known_tool_gets_mention(self):
        collector = self._collector(
            [reddit_post("Suno is amazing")],
            ['{"toolUrl": "https://suno.com", "toolName": "Suno", "category": "Audio/Music", "confidence": 0.9}'],
        )

        stats = collector.collect()

        self.assertEqual(stats["mentions"], 1)
        self.assertEqual(self.repository.get_tool("suno").mention_count, 3)
        self.assertEqual(self.repository.count_mentions_since("suno"), 1)

    def test_unknown_tool_is_queued_once(self):
        reply = '{"toolUrl": "https://newtool.ai", "toolName": "NewTool", "category": "Productivity", "confidence": 0.8}'
        collector = self._collector([reddit_post("NewTool launch"), reddit_post("NewTool again")], [reply, reply])

        stats = collector.collect()

        self.assertEqual(stats["queued"], 1)
        jobs = self.repository.jobs_with_status(JobStatus.PENDING)
        self.assertEqual(len(jobs), 1)
        self.assertEqual(jobs[0].url, "https://newtool.ai")
        self.assertEqual(jobs[0].tool_name, "NewTool")

    def test_low_confidence_and_unparseable_replies_are_skipped(self):
        collector = self._collector(
            [reddit_post("Maybe a tool?"), reddit_post("Random chat")],
            ['{"toolUrl": "https://maybe.ai", "toolName": "Maybe", "confidence": 0.5}', "no tool here"],
        )

        stats = collector.collect()

        self.assertEqual(stats["skipped"], 2)
        self.assertEqual(self.repository.jobs_with_status(JobStatus.PENDING), [])

    def test_failed_subreddit_is_skipped(self):
        collector = self._collector([], [])
        self.reddit.hot_posts.side_effect = requests.ConnectionError("offline")
        self.assertEqual(collector.fetch_posts(["AITools"]), [])


if __name__ == '__main__':
    unittest.main()
