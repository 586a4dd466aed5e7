"""Fixed prompts, labels and notices shown to the analyst."""

APP_NAME = "호텔 더본 AI 경영 분석 컨설턴트"

SYSTEM_INSTRUCTION = """당신은 '호텔 더본(Hotel The Born)'의 전속 경영 분석 컨설턴트입니다.

역할:
- 호텔 더본의 2017-2025년 운영 데이터와 2022-2025년 재무제표를 바탕으로 손익, 비용 구조, 객실 판매 실적을 분석합니다.
- 객실 유형별 적정 가격을 추천하고, 그 근거(수요, 점유율, 경쟁사 가격)를 함께 제시합니다.
- 경쟁 호텔 현황을 고려하여 실행 가능한 경영 전략을 수립합니다.

답변 형식:
- 한국어로 답변합니다.
- '## ' 또는 '### ' 제목으로 섹션을 구분합니다.
- 핵심 수치와 결론은 **굵게** 표시합니다.
- 항목은 '- ' 목록이나 '1. ' 번호 목록으로 정리합니다.
- 표, 링크, 인라인 코드는 사용하지 않습니다.

데이터에 없는 수치는 추정임을 명확히 밝히고, 추가로 필요한 자료가 있으면 요청하세요."""

CONTEXT_BLOCK_TEMPLATE = (
    "\n\n=== 사용자가 업로드한 추가 분석 데이터 ===\n"
    "{context}\n"
    "=====================================\n"
    "위 데이터를 최우선으로 참고하여 분석하세요."
)

FILE_UPDATE_PROMPT = (
    "다음 첨부된 최신 경영 데이터를 바탕으로 현재 상황을 재분석하고 업데이트된 조언을 제공해주세요."
)

FILE_UPDATE_USER_MESSAGE = "📁 **파일 업로드**: {filename}\n\n이 데이터를 바탕으로 추가 분석을 요청합니다."

WELCOME_MESSAGE = (
    f"안녕하세요! **{APP_NAME}**입니다.\n\n"
    "호텔 더본의 2017-2025년 운영 데이터와 재무제표를 바탕으로 심도 있는 경영 분석을 도와드리겠습니다.\n\n"
    "### 가능한 업무\n"
    "- 📉 **손익 및 비용 분석**\n"
    "- 💰 **객실 적정 가격 추천**\n"
    "- 📊 **경영 전략 수립**\n\n"
    "무엇을 도와드릴까요?"
)

UPDATE_ACTION = "최신 자료 업데이트"

INITIAL_SUGGESTIONS = [
    "2025년 손익 구조를 분석해줘",
    "객실 적정 가격을 추천해줘",
    "비용 절감 방안을 알려줘",
    "경쟁 호텔 대비 전략을 세워줘",
    UPDATE_ACTION,
]

MISSING_KEY_NOTICE = "API 키를 입력해주세요."
SESSION_FAILED_NOTICE = "세션을 시작할 수 없습니다. API 키를 확인해주세요."
TRANSPORT_ERROR_NOTICE = "⚠️ 죄송합니다. 분석 중 오류가 발생했습니다. 잠시 후 다시 시도해 주세요."
ATTACHMENT_ERROR_NOTICE = "⚠️ 파일 처리 중 오류가 발생했습니다. 지원되지 않는 형식이거나 파일이 너무 큽니다."

USER_LABEL = "👤 User"
MODEL_LABEL = "🤖 AI Consultant"
