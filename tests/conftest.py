import random

import pytest

from ai.content_service import ContentGenerationService
from ai.image_fetcher import ImageFetcher


class FakeEngine:
    """
    Stands in for ChatEngine. chat() pops queued payloads (an Exception is raised
    instead of returned); generate_image() returns a data URL naming the prompt,
    or runs image_behavior(prompt, aspect_ratio) when one is set.
    """

    def __init__(self, payloads=None, image_behavior=None):
        self.payloads = list(payloads or [])
        self.image_behavior = image_behavior
        self.chat_calls = []
        self.image_calls = []

    def queue(self, *payloads):
        self.payloads.extend(payloads)

    def chat(self, messages, caller_name="", max_tokens=4096, model_level=None, schema=None, temperature=None):
        self.chat_calls.append({
            "messages": messages,
            "caller_name": caller_name,
            "model_level": model_level,
            "schema": schema,
            "temperature": temperature,
        })
        payload = self.payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        return payload

    def generate_image(self, prompt, aspect_ratio="wide", caller_name="ImageGen"):
        self.image_calls.append((prompt, aspect_ratio))
        if self.image_behavior is not None:
            return self.image_behavior(prompt, aspect_ratio)
        return f"data:image/png;base64,{len(self.image_calls)}"


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def analysis_payload(careers=("Astronaut", "Pilot")):
    return {
        "feedback": "You love looking up at the stars!",
        "traits": ["Curious", "Brave", "Curious"],
        "careerPaths": [{"name": name, "description": f"A {name} explores."} for name in careers],
    }


def story_payload():
    return {
        "text": "Your rocket is on the launch pad.",
        "choices": [{"text": "Check the engines"}, {"text": "Talk to mission control"}],
    }


def mission_payload():
    return {
        "title": "Launch Day",
        "rounds": [
            {
                "instructions": "Find all the wrenches.",
                "skillToTest": "Focus",
                "gameMode": "SELECT_ALL_MATCHING",
                "objectTypes": [{"type": "wrench", "count": 3}, {"type": "bolt", "count": 2}],
                "correctObjectType": "wrench",
            },
            {
                "instructions": "Which one does not belong?",
                "skillToTest": "Logic",
                "gameMode": "SELECT_ODD_ONE_OUT",
                "objectTypes": [{"type": "star", "count": 4}, {"type": "wrench", "count": 1}],
                "correctObjectType": "wrench",
            },
        ],
    }


def conclusion_payload(unlocked=("Focus",)):
    return {
        "text": "The rocket launched perfectly.",
        "feedbackTitle": "Mission Accomplished!",
        "unlockedSkills": list(unlocked),
        "coachingFeedback": [
            {"text": "You spotted every wrench.", "icon": "Focus"},
            {"text": "Keep asking questions.", "icon": "sparkles"},
        ],
    }


def plan_payload():
    return {
        "planTitle": "Your Space Plan",
        "youtubeSuggestions": [
            {
                "title": "How rockets work for kids",
                "description": "A fun video.",
                "url": "https://www.youtube.com/results?search_query=how+rockets+work+for+kids",
            }
        ],
        "onlineCourseSuggestions": [
            {
                "title": "Intro to Astronomy",
                "description": "Stars and planets.",
                "platform": "Khan Academy",
                "url": "https://www.khanacademy.org/science/astronomy",
            },
            {
                "title": "Build a Model Rocket",
                "description": "Live class.",
                "platform": "Outschool",
                "url": "https://outschool.com/classes/model-rocket",
            },
        ],
        "localActivitySuggestions": [
            {
                "title": "Visit the planetarium",
                "description": "See the night sky.",
                "url": "https://calendar.google.com/calendar/render?action=TEMPLATE&text=Planetarium&details=Go",
            }
        ],
        "growthMap": {
            "centralCareer": {"title": "Astronaut", "imagePrompt": "A rocket for Astronaut"},
            "traitNodes": [
                {"title": "Curious", "imagePrompt": "A magnifying glass for Curious"},
                {"title": "Brave", "imagePrompt": "A shield for Brave"},
            ],
        },
        "parentEmail": {"subject": "Exploring space", "body": "Your child explored being an **Astronaut**."},
    }


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def service(engine, sleeps):
    fetcher = ImageFetcher(engine, sleep=sleeps, jitter=lambda: 0.0)
    return ContentGenerationService(engine, fetcher, sleep=sleeps, rng=random.Random(7))
