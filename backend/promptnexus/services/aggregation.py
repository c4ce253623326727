"""
提示词相关的纯计算规则

评分均值、标签解析、模型名称归类、提交内容校验、默认头像地址。
这里的函数不访问数据库，方便单独测试。
"""
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union
from urllib.parse import quote

DEFAULT_DESCRIPTION = "A user submitted prompt."
TAG_DELIMITER = ","
MAX_TAG_LENGTH = 50


class PromptCategory(str, Enum):
    """提示词分类"""
    CODING = "Coding"
    WRITING = "Writing"
    IMAGE_GEN = "Image Generation"
    VIDEO_GEN = "Video Generation"
    DATA_ANALYSIS = "Data Analysis"
    MARKETING = "Marketing"
    EDUCATION = "Education"
    BUSINESS = "Business"
    SEO = "SEO"
    SOCIAL_MEDIA = "Social Media"
    PRODUCTIVITY = "Productivity"
    HEALTH = "Health"
    FINANCE = "Finance"
    LEGAL = "Legal"
    CREATIVE = "Creative"
    GAMING = "Gaming"
    OTHER = "Other"


class AIModel(str, Enum):
    """已知的AI模型"""
    GEMINI_FLASH = "Gemini 2.5 Flash"
    GEMINI_PRO = "Gemini 3 Pro"
    GEMINI_1_5_PRO = "Gemini 1.5 Pro"
    GEMINI_1_5_FLASH = "Gemini 1.5 Flash"
    GPT_4_TURBO = "GPT-4 Turbo"
    GPT_4_O = "GPT-4o"
    GPT_3_5 = "GPT-3.5"
    CLAUDE_3_OPUS = "Claude 3 Opus"
    CLAUDE_3_SONNET = "Claude 3.5 Sonnet"
    CLAUDE_3_HAIKU = "Claude 3 Haiku"
    LLAMA_3_70B = "Llama 3 70B"
    LLAMA_3_8B = "Llama 3 8B"
    MISTRAL_LARGE = "Mistral Large"
    IMAGEN_3 = "Imagen 3"
    MIDJOURNEY_V6 = "Midjourney v6"
    DALL_E_3 = "DALL-E 3"
    STABLE_DIFFUSION_3 = "Stable Diffusion 3"
    VEO = "Veo"
    SORA = "Sora"
    GROK_1_5 = "Grok 1.5"
    OTHER = "Other"


_KNOWN_MODELS = {m.value.lower(): m for m in AIModel}
_CATEGORIES = {c.value.lower(): c for c in PromptCategory}


class ModelLabel(NamedTuple):
    """模型名称：kind 为 known（枚举内）或 custom（用户自填）"""
    kind: str
    value: str


def classify_model(label: Optional[str]) -> Optional[ModelLabel]:
    """把模型名称归类为已知模型或自定义模型，已知模型统一为标准写法"""
    if label is None:
        return None
    label = label.strip()
    if not label:
        return None
    known = _KNOWN_MODELS.get(label.lower())
    if known is not None:
        return ModelLabel("known", known.value)
    return ModelLabel("custom", label)


def normalize_category(category: Optional[str]) -> Optional[PromptCategory]:
    """分类名称不区分大小写，无法识别时返回None"""
    if category is None:
        return PromptCategory.OTHER
    if isinstance(category, PromptCategory):
        return category
    return _CATEGORIES.get(category.strip().lower())


def parse_tags(raw: Union[None, str, Iterable[str]]) -> List[str]:
    """
    解析标签

    接受列表或逗号分隔的字符串，去掉首尾空白和空项，重复标签只保留第一次出现的。
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(TAG_DELIMITER)
    else:
        items = list(raw)

    tags = []
    seen = set()
    for item in items:
        if item is None:
            continue
        tag = str(item).strip()[:MAX_TAG_LENGTH]
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        tags.append(tag)
    return tags


def compute_rating(values: Iterable[int]) -> Tuple[float, int]:
    """计算平均分（四舍五入保留一位小数）和评分人数，没有评分时为 (0.0, 0)"""
    values = list(values)
    if not values:
        return 0.0, 0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)), len(values)


def is_valid_rating(rating) -> bool:
    # bool 是 int 的子类，需要排除
    return isinstance(rating, int) and not isinstance(rating, bool) and 1 <= rating <= 5


def validate_prompt_input(
    title: Optional[str],
    content: Optional[str],
    model: Optional[str] = None,
    category: Optional[str] = None,
) -> Dict[str, str]:
    """校验提交的提示词，返回 字段名 -> 错误信息，全部通过时为空字典"""
    errors = {}

    if not title or len(title.strip()) < 3:
        errors["title"] = "标题至少需要3个字符"

    if not content or len(content.strip()) < 10:
        errors["content"] = "提示词内容至少需要10个字符"

    # 模型可以不填，填了自定义名称则至少2个字符
    if model is not None and model.strip():
        label = classify_model(model)
        if label.kind == "custom" and len(label.value) < 2:
            errors["model"] = "请选择或输入有效的AI模型"

    if normalize_category(category) is None:
        errors["category"] = "请选择有效的分类"

    return errors


def build_avatar_url(seed: Optional[str], gender: Optional[str] = None) -> str:
    """根据用户名和性别生成默认头像地址"""
    s = quote((seed or "placeholder").strip(), safe="")
    url = f"https://api.dicebear.com/7.x/avataaars/svg?seed={s}"
    if gender == "female":
        url += "&top[]=longHair&top[]=bob&top[]=straight01&facialHairProbability=0&accessoriesProbability=20"
    else:
        url += "&top[]=shortHair&top[]=theCaesar&top[]=theCaesarSidePart&facialHairProbability=20&accessoriesProbability=0"
    return url
