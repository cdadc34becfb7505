from app.models.quiz import Difficulty, QuestionType

DIFFICULTY_HINTS = {
    Difficulty.easy: "- Direct questions about the main concepts",
    Difficulty.medium: "- Questions that require understanding of the concepts",
    Difficulty.hard: "- Questions that require deep analysis and application of the concepts",
}

_TEST_FORMAT = """[
  {
    "type": "test",
    "question": "Question text",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Why this is the correct answer"
  }
]"""

_ESSAY_FORMAT = """[
  {
    "type": "essay",
    "question": "A question that requires an elaborated answer",
    "expectedAnswer": "The complete expected answer",
    "explanation": "Key points the answer must include"
  }
]"""

_TEST_RULES = """- Every question must have exactly 4 options
- correctAnswer must be the index (0-3) of the correct option
- Options must be plausible but only one may be correct; vary the position of the correct answer"""

_ESSAY_RULES = """- expectedAnswer must be complete and detailed
- explanation lists the key points a good answer includes"""


def quiz_prompt(material: str, n: int, difficulty: Difficulty, question_type: QuestionType) -> str:
    if question_type == QuestionType.essay:
        kind = f"EXACTLY {n} open-ended (essay) questions"
        fmt, rules = _ESSAY_FORMAT, _ESSAY_RULES
    elif question_type == QuestionType.mixed:
        kind = (
            f"EXACTLY {n} questions, ALTERNATING multiple-choice (\"type\": \"test\") "
            f"and open-ended (\"type\": \"essay\") questions"
        )
        fmt = f"Multiple-choice:\n{_TEST_FORMAT}\n\nOpen-ended:\n{_ESSAY_FORMAT}"
        rules = f"{_TEST_RULES}\n{_ESSAY_RULES}\n- Every object must carry its \"type\""
    else:
        kind = f"EXACTLY {n} multiple-choice questions"
        fmt, rules = _TEST_FORMAT, _TEST_RULES

    return f"""You are a teacher writing an exam.

Study material:
{material}

Generate {kind} based on this material.

Difficulty level: {difficulty.value}
{DIFFICULTY_HINTS[difficulty]}

RESPONSE FORMAT (JSON):
{fmt}

RULES:
- Return ONLY the JSON array, no additional text
{rules}
- Questions must cover different aspects of the material
- Explanations must be educational and clear

Answer ONLY with the JSON:"""


def essay_evaluation_prompt(question: str, expected_answer: str, user_answer: str) -> str:
    return f"""You are an academic grader. Evaluate the student's answer.

QUESTION:
{question}

EXPECTED ANSWER:
{expected_answer}

STUDENT ANSWER:
{user_answer}

Decide whether the answer is correct considering that it:
1. Includes the key concepts
2. Is accurate and relevant
3. Shows understanding of the topic
Wording may differ from the expected answer.

RESPONSE FORMAT (JSON):
{{
  "isCorrect": true or false (true if the answer is at least 70% correct),
  "feedback": "specific comment on the answer (what is right, what is missing)"
}}

RULES:
- Return ONLY the JSON object, no additional text
- Be constructive in the feedback
- isCorrect must be a boolean

Answer ONLY with the JSON:"""


def recitation_prompt(recited_text: str, expected_text: str) -> str:
    return f"""You are an expert teacher evaluating a student's understanding.

Compare the student's explanation with the original study material and evaluate:
1. How well the student understands and explains the concepts
2. Which important concepts were left out
3. Which concepts were explained incorrectly or imprecisely

IMPORTANT RULES:
- Return ONLY a valid JSON object, no additional text
- accuracy must reflect how complete and correct the explanation was
- Be constructive but honest
- Explaining correctly in one's own words is POSITIVE

RESPONSE FORMAT (JSON):
{{
  "accuracy": <number between 0 and 100>,
  "missingParts": ["missing concept 1", "missing concept 2"],
  "incorrectParts": ["error or imprecision 1", "error 2"],
  "summary": "Constructive overall analysis of the student's explanation"
}}

ORIGINAL STUDY MATERIAL:
{expected_text}

STUDENT EXPLANATION:
{recited_text}

Answer ONLY with the JSON, no markdown, no extra explanation:"""


BODY_LANGUAGE_PROMPT = """You are a public speaking coach. Analyse the body language of the
person in this recording of a student explaining a lesson.

RESPONSE FORMAT (JSON):
{
  "confidence": <integer 1-10>,
  "nervousness": <integer 1-10>,
  "posture": "short description of the posture",
  "eyeContact": "short description of the eye contact",
  "facialExpression": "short description of the facial expression",
  "suggestions": ["improvement 1", "improvement 2"]
}

Return ONLY the JSON object:"""
