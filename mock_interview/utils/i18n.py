"""
Localized strings for server-generated messages.
The browser renders its own chrome; these are the lines the interviewer
"says" and the error texts surfaced as notifications.
"""
from typing import Dict, List

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "vi": {
        "initial_loading": "Xin chào! Tôi sẽ là người phỏng vấn bạn hôm nay. Chúng ta đang phỏng vấn cho vị trí",
        "generating_questions": "Tôi đang chuẩn bị một vài câu hỏi, vui lòng đợi trong giây lát...",
        "ready_to_start": "Hãy bắt đầu.",
        "error_title": "Lỗi",
        "question_generation_error": "Không thể tạo câu hỏi.",
        "question_generation_error_toast": "Không thể tạo câu hỏi phỏng vấn. Vui lòng thử lại.",
        "response_error_toast": "Đã xảy ra lỗi khi tạo phản hồi. Chuyển sang câu hỏi tiếp theo.",
        "summary_error_toast": "Không thể tạo tóm tắt phỏng vấn của bạn. Vui lòng thử lại sau.",
        "summary_not_ready": "Bản tóm tắt chưa sẵn sàng.",
        "tts_error_title": "Lỗi âm thanh",
        "tts_error": "Không thể phát âm thanh phỏng vấn.",
        "transcription_error_title": "Lỗi phiên âm",
        "transcription_unclear": "Không thể hiểu âm thanh. Vui lòng thử lại.",
        "transcription_failed": "Không thể phiên âm âm thanh.",
        "start_error": "Không thể xử lý CV hoặc bắt đầu phỏng vấn. Vui lòng thử lại.",
        "max_file_size": "Kích thước tệp tối đa là 5MB.",
        "unsupported_file": "Chỉ hỗ trợ tệp PDF, DOCX hoặc TXT.",
        "empty_cv": "Không thể đọc nội dung từ CV.",
        "job_role_required": "Vui lòng chọn một vai trò công việc.",
        "software_engineer": "Kỹ sư phần mềm",
        "product_manager": "Quản lý sản phẩm",
        "sales_representative": "Đại diện bán hàng",
        "data_scientist": "Nhà khoa học dữ liệu",
        "ux_designer": "Nhà thiết kế UX/UI",
    },
    "en": {
        "initial_loading": "Hello! I will be your interviewer today. We are interviewing for the position of",
        "generating_questions": "I'm preparing a few questions, please wait a moment...",
        "ready_to_start": "Let's begin.",
        "error_title": "Error",
        "question_generation_error": "Could not generate questions.",
        "question_generation_error_toast": "Failed to generate interview questions. Please try again.",
        "response_error_toast": "An error occurred while generating a response. Moving to the next question.",
        "summary_error_toast": "Could not generate your interview summary. Please try again later.",
        "summary_not_ready": "The summary is not ready yet.",
        "tts_error_title": "Audio Error",
        "tts_error": "Could not play interview audio.",
        "transcription_error_title": "Transcription Error",
        "transcription_unclear": "Could not understand the audio. Please try again.",
        "transcription_failed": "Could not transcribe the audio.",
        "start_error": "Could not process CV or start the interview. Please try again.",
        "max_file_size": "Maximum file size is 5MB.",
        "unsupported_file": "Only PDF, DOCX or TXT files are supported.",
        "empty_cv": "Could not read any text from the CV.",
        "job_role_required": "Please select a job role.",
        "software_engineer": "Software Engineer",
        "product_manager": "Product Manager",
        "sales_representative": "Sales Representative",
        "data_scientist": "Data Scientist",
        "ux_designer": "UX/UI Designer",
    },
}

# Role values are always the English names; labels are localized
JOB_ROLE_KEYS = [
    "software_engineer",
    "product_manager",
    "sales_representative",
    "data_scientist",
    "ux_designer",
]


def t(language: str, key: str) -> str:
    """Look up a localized string, falling back to Vietnamese then the key."""
    table = TRANSLATIONS.get(language, TRANSLATIONS["vi"])
    return table.get(key) or TRANSLATIONS["vi"].get(key, key)


def job_roles(language: str) -> List[Dict[str, str]]:
    """Role catalogue for the selection form."""
    return [
        {"value": TRANSLATIONS["en"][key], "label": t(language, key)}
        for key in JOB_ROLE_KEYS
    ]
