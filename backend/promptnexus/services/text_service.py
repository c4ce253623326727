"""
文本生成服务（Gemini）

只用于生成简短描述和优化提示词。所有调用都是尽力而为：
没有配置密钥或调用失败时返回原始输入，不影响主流程。
"""
import logging
from typing import Optional

from google import genai
from google.genai import errors

from promptnexus.core.config import settings
from promptnexus.services.aggregation import DEFAULT_DESCRIPTION

logger = logging.getLogger(__name__)

OPTIMIZE_TEMPLATE = (
    "You are an expert prompt engineer. Optimize the following prompt to be more effective "
    "for a large language model. Make it clearer, more specific, and structured. "
    "Do not lose the original intent.\n\n"
    "Original Prompt:\n\"{prompt}\"\n\n"
    "Return ONLY the optimized prompt text, no explanations."
)

DESCRIBE_TEMPLATE = (
    "Generate a very short (one sentence, max 15 words) description for this AI prompt:\n\n"
    "\"{content}\""
)


class TextService:
    """Gemini 文本服务的简单封装"""

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash"):
        self.api_key = api_key
        self.model = model
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _generate(self, contents: str) -> Optional[str]:
        if not self.enabled:
            return None
        try:
            response = self.client.models.generate_content(model=self.model, contents=contents)
        except errors.APIError as e:
            logger.warning("Gemini接口调用失败: %s", e)
            return None
        except Exception:
            logger.exception("调用文本生成服务出现异常")
            return None
        text = (response.text or "").strip()
        return text or None

    def optimize_prompt(self, original: str) -> str:
        """优化提示词，失败时原样返回"""
        if not self.enabled:
            logger.debug("未配置GEMINI_API_KEY，跳过提示词优化")
            return original
        return self._generate(OPTIMIZE_TEMPLATE.format(prompt=original)) or original

    def generate_description(self, content: str) -> str:
        """生成一句话描述，失败时返回默认描述"""
        return self._generate(DESCRIBE_TEMPLATE.format(content=content)) or DEFAULT_DESCRIPTION


text_service = TextService(api_key=settings.GEMINI_API_KEY, model=settings.GEMINI_MODEL)


def get_text_service() -> TextService:
    """FastAPI依赖，测试中可以替换"""
    return text_service
