import copy

import pytest

SAMPLE = {"user": {"name": "Ana", "age": 3}, "tags": ["x", "y"]}


@pytest.fixture
def sample():
  return copy.deepcopy(SAMPLE)


@pytest.fixture
def nested():
  return {
    "data": {
      "items": [
        {"id": 1, "title": "Banana split", "meta": {"owner": "ana"}},
        {"id": 2, "title": "Apple", "meta": {"owner": "bob"}},
      ],
      "count": 2,
    },
    "analytics": None,
  }
