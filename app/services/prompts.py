import re

IDENTITY_QUESTION_PATTERN = re.compile(r"which ai|what ai|are you groq|who are you", re.IGNORECASE)

IDENTITY_RESPONSE = (
    "Hey there! 👋\n\n"
    "I'm Epsilora AI, your educational assistant! I'm here to help you learn and grow. "
    "How can I assist you today? 😊"
)

QUIZ_JSON_EXAMPLE = (
    '[{"question":"question text",'
    '"options":["A. option text","B. option text","C. option text","D. option text"],'
    '"correctAnswer":"A"}]'
)


def build_quiz_prompt(course_name: str, count: int, difficulty: str) -> str:
    """Instruction for a batch of multiple choice questions.

    The formatting rules are spelled out in full because models otherwise
    drift into prose, markdown fences or inconsistent option labels.
    """
    return (
        f'Create exactly {count} multiple choice questions about "{course_name}" '
        f"at {difficulty} difficulty. "
        "Each question must have exactly 4 options labeled A, B, C, D and exactly one correct answer. "
        'The "correctAnswer" field must be a single letter: A, B, C or D. '
        "Write real, specific questions about the subject; never use filler text such as "
        '"Question 1 about ..." or "Option A". '
        f"Format the result as a valid JSON array in exactly this format: {QUIZ_JSON_EXAMPLE}. "
        "Return only the JSON array, with no markdown, no code fences and no explanations."
    )


def build_explanation_prompt(message: str) -> str:
    return (
        "You are a helpful AI tutor. Please explain the following quiz question and its "
        f"correct answer in two clear, concise sentences:\n\n{message}"
    )


def build_assist_prompt(message: str) -> str:
    return f"""
You are an engaging and helpful AI assistant for an educational platform. Reply in a way that:
1. Is well formatted with markdown
2. Uses emojis where they fit
3. Structures information so it is easy to read, with headings where useful
4. Uses bullet points, numbered lists or tables when relevant
5. Highlights important information with **bold** or *italics*
6. Uses `code` formatting for technical terms and fenced code blocks with a language for examples

Here's the user's message: {message}
"""
