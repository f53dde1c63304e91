from shortlinks.core.allocator import ShortLinkAllocator
from shortlinks.core.resolver import RedirectResolver


__all__ = ['ShortLinkAllocator', 'RedirectResolver']
