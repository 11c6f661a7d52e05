"""
Home page section management and storefront home payload.

Sections are a short ordered list; every reorder rewrites `order` for the
whole list so positions stay contiguous (0..n-1).
"""
import logging

from django.db import transaction

from travelmall.catalog.queries import get_best_sellers, get_time_deals
from travelmall.catalog.serializers import TravelProductListSerializer
from travelmall.core.cache_signals import suspend_cache_signals
from travelmall.core.cache_utils import invalidate_storefront_cache
from .models import MainPageSection, HeroSlide, Banner
from .serializers import MainPageSectionSerializer, HeroSlideSerializer, BannerSerializer

logger = logging.getLogger(__name__)

# key, type, title, is_fixed
DEFAULT_SECTIONS = [
    ('header', 'HEADER', '헤더 네비게이션', True),
    ('hero', 'HERO', '히어로 섹션', True),
    ('search', 'SEARCH', '검색 섹션', True),
    ('banner', 'BANNER', '메인 배너', False),
    ('regionalTravel', 'REGIONAL_TRAVEL', '지역별 여행', False),
    ('timeDeal', 'TIME_DEAL', '타임딜', False),
    ('themeTravel', 'THEME_TRAVEL', '테마별 여행', False),
    ('promotion', 'PROMOTION', '특가 프로모션', False),
    ('review', 'REVIEW', '여행 후기', False),
    ('footer', 'FOOTER', '푸터', True),
]


def _create_default_sections():
    MainPageSection.objects.bulk_create([
        MainPageSection(key=key, type=section_type, title=title, is_fixed=is_fixed, is_visible=True, order=index)
        for index, (key, section_type, title, is_fixed) in enumerate(DEFAULT_SECTIONS)
    ])


def get_sections():
    """All sections by order; seeds the defaults when none exist"""
    if not MainPageSection.objects.exists():
        with transaction.atomic():
            _create_default_sections()
        logger.info("Seeded default main page sections")
    return list(MainPageSection.objects.order_by('order', 'id'))


def reorder_sections(source_index, destination_index):
    """
    Move the section at source_index to destination_index.

    Every section gets order = its new position. Raises ValueError for
    indices outside the list or when the moved section is fixed.
    """
    sections = get_sections()
    count = len(sections)
    if not (0 <= source_index < count) or not (0 <= destination_index < count):
        raise ValueError(f'Section index out of range (0-{count - 1})')
    if sections[source_index].is_fixed:
        raise ValueError(f'Section {sections[source_index].key} is fixed and cannot be moved')

    moved = sections.pop(source_index)
    sections.insert(destination_index, moved)

    with transaction.atomic(), suspend_cache_signals():
        for index, section in enumerate(sections):
            section.order = index
        MainPageSection.objects.bulk_update(sections, ['order'])
    transaction.on_commit(invalidate_storefront_cache)

    logger.info(f"Section {moved.key} moved from {source_index} to {destination_index}")
    return sections


def toggle_section_visibility(key):
    """Flip is_visible of a non-fixed section"""
    get_sections()
    section = MainPageSection.objects.filter(key=key).first()
    if section is None:
        raise MainPageSection.DoesNotExist(f'Section {key} not found')
    if section.is_fixed and section.type != 'BANNER':
        raise ValueError(f'Section {key} is fixed and cannot be hidden')

    section.is_visible = not section.is_visible
    section.save(update_fields=['is_visible', 'updated_at'])
    logger.info(f"Section {key} visibility set to {section.is_visible}")
    return section


def reset_sections():
    """Restore the default ten sections"""
    with transaction.atomic(), suspend_cache_signals():
        MainPageSection.objects.all().delete()
        _create_default_sections()
    transaction.on_commit(invalidate_storefront_cache)
    logger.info("Main page sections reset to defaults")
    return list(MainPageSection.objects.order_by('order', 'id'))


def move_hero_slide(slide, direction):
    """Swap a hero slide with its neighbour ('up' or 'down'); orders become 1..n"""
    slides = list(HeroSlide.objects.order_by('order', 'id'))
    current_index = next(i for i, s in enumerate(slides) if s.pk == slide.pk)
    new_index = current_index - 1 if direction == 'up' else current_index + 1
    if new_index < 0 or new_index >= len(slides):
        return slides

    slides.insert(new_index, slides.pop(current_index))
    with transaction.atomic(), suspend_cache_signals():
        for index, item in enumerate(slides, start=1):
            item.order = index
        HeroSlide.objects.bulk_update(slides, ['order'])
    transaction.on_commit(invalidate_storefront_cache)
    return slides


def build_storefront_home():
    """Uncached storefront home payload"""
    sections = [section for section in get_sections() if section.is_visible]
    return {
        'sections': MainPageSectionSerializer(sections, many=True).data,
        'hero_slides': HeroSlideSerializer(
            HeroSlide.objects.filter(is_active=True).order_by('order', 'id'), many=True
        ).data,
        'banners': BannerSerializer(
            Banner.objects.filter(is_active=True).order_by('-created_at'), many=True
        ).data,
        'best_sellers': TravelProductListSerializer(get_best_sellers(), many=True).data,
        'time_deals': TravelProductListSerializer(get_time_deals(), many=True).data,
    }
