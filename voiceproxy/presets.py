from __future__ import annotations

from typing import Dict, NamedTuple


class VoicePreset(NamedTuple):
    voice: str
    instructions: str


DEFAULT_LANGUAGE = "ko"

PRESETS: Dict[str, VoicePreset] = {
    "ko": VoicePreset(
        voice="shimmer",
        instructions=(
            "당신은 친절한 한국어 대화 상대입니다. "
            "짧고 자연스러운 문장으로 대답하고, 사용자가 말을 마칠 때까지 기다린 뒤 응답하세요. "
            "모르는 내용은 솔직하게 모른다고 말하세요."
        ),
    ),
    "en": VoicePreset(
        voice="alloy",
        instructions=(
            "You are a friendly English conversation partner. "
            "Answer in short, natural sentences and wait for the user to finish speaking before you reply. "
            "If you do not know something, say so plainly."
        ),
    ),
    "ja": VoicePreset(
        voice="sage",
        instructions=(
            "あなたは親切な日本語の会話相手です。"
            "短く自然な文で答え、ユーザーが話し終えるまで待ってから返答してください。"
            "分からないことは正直に分からないと伝えてください。"
        ),
    ),
}


def get_preset(language: str, default_language: str = DEFAULT_LANGUAGE) -> VoicePreset:
    """Preset for ``language``, falling back to the default locale."""
    key = (language or "").strip().lower()
    return PRESETS.get(key) or PRESETS.get(default_language) or PRESETS[DEFAULT_LANGUAGE]
