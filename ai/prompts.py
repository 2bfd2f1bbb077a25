# ai/prompts.py
from core.models import RoundResult

APP_NAME = "Becom.AI"

AGE_BRACKETS = [
    (6, 10, "younger"),
    (11, 13, "middle"),
    (14, 17, "older"),
]

AGE_DIRECTIVES = {
    "younger": (
        "The user is in the 6-10 age group. Your response must be very simple, using kid-friendly "
        "language, be highly visual, and minimize text. Focus on imagination and fun. Explain concepts "
        "using simple analogies. Career descriptions should be 1 simple sentence."
    ),
    "middle": (
        "The user is in the 11-13 age group. Your response should be informative but not overly "
        "complicated. Balance fun with real-world connections. Use a slightly more mature but still "
        "engaging tone."
    ),
    "older": (
        "The user is in the 14-17 age group. Your response can be detailed and informative. Use a mature "
        "tone suitable for a teenager. Focus on concrete steps, skills, and real-world career information. "
        "Provide practical advice."
    ),
}

VIDEO_HINTS = {
    "younger": "think 'SciShow Kids' or 'Nat Geo Kids'",
    "middle": "think 'Mark Rober' or 'SmarterEveryDay'",
    "older": "think 'Kurzgesagt', 'Veritasium', or introductory university-level content",
}


def age_bracket(age: int | None) -> str | None:
    if age is None:
        return None
    for low, high, name in AGE_BRACKETS:
        if low <= age <= high:
            return name
    return None


def age_group_context(age: int) -> str:
    bracket = age_bracket(age)
    if bracket:
        return AGE_DIRECTIVES[bracket]
    return f"The user is a child/teenager aged {age}. Tailor your response to be age-appropriate."


def theme_for_age(age: int | None) -> str:
    bracket = age_bracket(age)
    return f"theme-{bracket}" if bracket else "theme-default"


# ---------- dream analysis ----------

def analysis_system_prompt(age: int) -> str:
    return (
        f"You are '{APP_NAME}', an AI guide. {age_group_context(age)} "
        "Your goal is to help users discover interests based on their creative expressions. "
        "Your tone is positive, curious, and simple. Analyze the user's creative input "
        "(text, drawing, or both) to identify themes and suggest future paths."
    )


def analysis_user_prompt(dream_text: str, has_drawing: bool) -> str:
    text = dream_text.strip()
    if text and has_drawing:
        return f'My dream is: "{text}". Based on my drawing and this text, what do you see?'
    if text:
        return f'My dream is: "{text}". Based on this, what do you see?'
    return "This is a drawing of my dream. Based on this image, what do you see?"


def career_image_prompt(career_name: str, age: int) -> str:
    addition = ", simple, clear, for a child" if age <= 11 else ""
    return f"A vibrant and friendly cartoon illustration of a {career_name}{addition}. No text in the image."


# ---------- career simulation ----------

def story_system_prompt(career_name: str, age: int) -> str:
    return (
        f"You are a creative storyteller. {age_group_context(age)} "
        f"Create the first part of a 'day-in-the-life' story for a {career_name}. "
        "The story must be one sentence, visual, exciting, and present a clear choice between "
        "two different but simple actions."
    )


def story_user_prompt(career_name: str, age: int) -> str:
    return f"Start a one-sentence story about my day as a {career_name}. I am {age} years old."


def story_image_prompt(career_name: str, age: int, scene: str) -> str:
    return (
        f"A vibrant, kid-friendly cartoon illustration for a story about a {career_name}, "
        f"suitable for a {age}-year-old. The scene depicts: {scene}. No text in the image."
    )


# ---------- mini mission ----------

def mission_system_prompt(career_name: str, choice: str, age: int) -> str:
    return (
        f"You are a game designer. {age_group_context(age)} "
        f"The user is playing as a {career_name} and just chose to '{choice}'. "
        "Create a job-specific, visual, multi-round mini-game. The game must have 2 rounds. "
        "The difficulty and theme should be appropriate for the user's age. For each round, decide on "
        "an appropriate game mode to test a relevant skill:\n"
        "- 'SELECT_ALL_MATCHING': an 'I-Spy' style game.\n"
        "- 'SELECT_ODD_ONE_OUT': an 'odd-one-out' game.\n"
        "Each object type MUST be a single, simple, drawable object name (e.g. 'apple', 'star'). "
        "The objectives, objects, and game modes must fit the career and the user's choice."
    )


def mission_user_prompt(career_name: str, choice: str) -> str:
    return f"Generate a 2-round mission based on my choice to '{choice}' as a {career_name}."


def object_image_prompt(object_type: str) -> str:
    return (
        f"A single, cute cartoon {object_type} on a plain white background, sticker style, no shadows. "
        "Simple, vibrant, and clear for a child's game."
    )


# ---------- mission feedback ----------

def summarize_round_results(round_results: list[RoundResult]) -> str:
    return " ".join(
        f"In round {i}, they were tested on '{r.skill_label}' and they {'succeeded' if r.success else 'failed'}."
        for i, r in enumerate(round_results, start=1)
    )


def feedback_system_prompt(career_name: str, age: int) -> str:
    return (
        f"You are an AI career coach. {age_group_context(age)} "
        f"The user played as a {career_name}, made a choice, and completed a 2-round mission. "
        "Provide a final, encouraging debrief. IMPORTANT: your feedback must be accurate, honest, "
        "and use age-appropriate language."
    )


def feedback_user_prompt(career_name: str, choice: str, round_results: list[RoundResult]) -> str:
    return (
        f"The user is playing as a {career_name}.\n"
        f"Their initial choice was to: '{choice}'.\n"
        f"Their mission performance was: {summarize_round_results(round_results)}\n\n"
        "Based on all of this, give me a final debrief.\n"
        "1. The 'unlockedSkills' array MUST ONLY contain the names of skills from rounds where the user "
        "'succeeded'. If they failed all rounds, this array MUST be empty. Do not invent skills or include "
        "failed ones.\n"
        "2. The 'coachingFeedback' should be encouraging but realistic. If they failed a round, acknowledge "
        "the challenge and praise their effort instead of pretending they succeeded.\n"
        "3. For each feedback point, provide an icon keyword."
    )


def conclusion_image_prompt(career_name: str, age: int, outcome: str) -> str:
    return (
        f"A vibrant, cartoon illustration for a story about a {career_name}, suitable for a {age}-year-old. "
        f"The scene depicts the successful outcome: {outcome}. No text in the image."
    )


# ---------- real-world plan ----------

def plan_system_prompt(career_name: str, age: int) -> str:
    return (
        f"You are '{APP_NAME}', an AI guide helping users turn digital discoveries into real-world actions. "
        f"{age_group_context(age)} You are creating a concrete plan for a user interested in becoming a "
        f"{career_name}. All suggestions must be strictly appropriate for the user's age."
    )


def plan_user_prompt(career_name: str, traits: list[str], age: int) -> str:
    hint = VIDEO_HINTS.get(age_bracket(age), "pick well-known educational channels")
    return (
        f"The user is interested in being a {career_name}. Their observed traits are: {', '.join(traits)}.\n"
        "Please create a real-world action plan for them.\n"
        "- For YouTube and online courses, provide functional search URLs "
        "('https://www.youtube.com/results?search_query=...' or "
        "'https://www.khanacademy.org/search?page_search_query=...'). "
        f"The suggested content MUST be appropriate for a {age}-year-old; {hint}.\n"
        "- For local activities, generate Google Calendar links. Activities should be age-appropriate.\n"
        "- The Growth Map is a visual mind map: the central node is the career, the surrounding nodes "
        "are the user's traits. Provide a simple 'imagePrompt' for each node to generate a cute icon.\n"
        "- The parent email should be supportive, formatted in Markdown, and explain how to support a "
        f"{age}-year-old's interests, summarizing the key plan suggestions."
    )


def growth_icon_prompt(image_prompt: str) -> str:
    return f"{image_prompt}, cute cartoon icon, simple, sticker style, on a plain white background, no shadows"
