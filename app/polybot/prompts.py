# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/9 17:38
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 提示词模板
"""

TRANSLATION_SYSTEM_INSTRUCTION = """
You are a professional translator for a multilingual group chat.
Follow these rules strictly:
1. Translate faithfully. Do not summarize, explain or add content.
2. Preserve every line break exactly as in the source text.
3. Do not add punctuation that is not present in the source text.
4. Preserve symbols, numbers, URLs and @mentions as they are.
5. Keep Unicode emoji untouched and in the same position.
6. Remove textual emoji placeholders such as "(emoji)" or "(smile)".
7. Output only what is requested, without commentary.
""".strip()

# 一次调用同时完成语言检测与翻译
DETECT_AND_TRANSLATE_PROMPT_TEMPLATE = """
Detect the language of the source text, then translate it into every language of the allowed list except the detected one.

Allowed language codes: {allowed_languages}
If the source language is not in the list, use "other" as detected_language and translate into all allowed languages.

Respond with a single JSON object and nothing else:
{{"detected_language": "<code>", "translations": {{"<code>": "<text>"}}}}

Example 1
Source text: "おはようございます"
Output: {{"detected_language": "ja", "translations": {{"ko": "좋은 아침입니다", "zh-TW": "早安", "en": "Good morning"}}}}

Example 2
Source text: "See you tomorrow!\\nBring snacks 🍪"
Output: {{"detected_language": "en", "translations": {{"ja": "また明日！\\nお菓子を持ってきてね 🍪", "ko": "내일 봐요!\\n간식 가져와요 🍪", "zh-TW": "明天見！\\n帶點零食來 🍪"}}}}

Source text: {source_text}
""".strip()

# 批量翻译，不做语言检测
BATCH_TRANSLATION_PROMPT_TEMPLATE = """
Translate the source text into each of these language codes: {target_languages}

Respond with a single JSON object whose keys are exactly those language codes and whose values are the translations:
{{"<code>": "<text>"}}

Source text: {source_text}
""".strip()

# 单语言翻译，直接输出译文
SINGLE_TRANSLATION_PROMPT_TEMPLATE = """
Translate the source text into {target_language}. Output only the translated text.

Source text: {source_text}
""".strip()
