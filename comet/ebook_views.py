import logging
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Avg, Count, Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .http import error, json_body, text_field
from .models import (
    EBOOK_GENRE_CHOICES, EBOOK_STATUS_CHOICES, Ebook, EbookBookmark, EbookChapter,
    EbookLike, EbookReview,
)
from .serializers import chapter_data, ebook_data, review_data

logger = logging.getLogger(__name__)

GENRES = {g for g, _ in EBOOK_GENRE_CHOICES}
STATUSES = {s for s, _ in EBOOK_STATUS_CHOICES}


def _visible_ebook(request, ebook_id):
    """Published ebooks for everyone, any status for the author."""
    ebook = get_object_or_404(Ebook.objects.select_related('user'), id=ebook_id)
    if ebook.status != 'published' and not (
        request.user.is_authenticated and request.user.pk == ebook.user_id
    ):
        return None
    return ebook


def _own_ebook(request, ebook_id):
    return get_object_or_404(Ebook, id=ebook_id, user=request.user)


def _clean_ebook_fields(data, ebook=None):
    title = text_field(data, 'title', ebook.title if ebook else '')
    genre = text_field(data, 'genre') or (ebook.genre if ebook else 'other')
    status = text_field(data, 'status') or (ebook.status if ebook else 'draft')
    if not title:
        raise ValueError("Title required")
    if genre not in GENRES:
        raise ValueError("Invalid genre")
    if status not in STATUSES:
        raise ValueError("Invalid status")
    return {
        "title": title,
        "description": text_field(data, 'description', ebook.description if ebook else ''),
        "genre": genre,
        "status": status,
    }


def _refresh_rating(ebook):
    stats = EbookReview.objects.filter(ebook=ebook).aggregate(n=Count('id'), avg=Avg('rating'))
    average = Decimal(str(stats['avg'] or 0)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    Ebook.objects.filter(id=ebook.id).update(reviews_count=stats['n'], average_rating=average)


# ============================================================================
# SECTION 1: EBOOKS
# ============================================================================

@require_http_methods(["GET", "POST"])
def ebooks(request):
    """GET lists published ebooks (genre and search filters), POST creates one."""
    if request.method == "GET":
        qs = Ebook.objects.filter(status='published').select_related('user').annotate(
            n_chapters=Count('chapters')
        ).order_by('-created_at')
        genre = request.GET.get('genre')
        if genre and genre != 'other':
            qs = qs.filter(genre=genre)
        query = (request.GET.get('q') or '').strip()
        if query:
            qs = qs.filter(Q(title__icontains=query) | Q(description__icontains=query))
        return JsonResponse({"results": [ebook_data(e, e.n_chapters) for e in qs]})

    if not request.user.is_authenticated:
        return error("Authentication required", status=401)
    try:
        fields = _clean_ebook_fields(json_body(request))
    except ValueError as e:
        return error(str(e))

    ebook = Ebook.objects.create(user=request.user, **fields)
    if 'cover' in request.FILES:
        ebook.cover = request.FILES['cover']
        ebook.save(update_fields=['cover'])
    logger.info(f"Ebook {ebook.id} created by {request.user.username}")
    return JsonResponse({"ebook": ebook_data(ebook, 0)}, status=201)


@login_required
@require_GET
def my_ebooks(request):
    qs = Ebook.objects.filter(user=request.user).select_related('user').annotate(
        n_chapters=Count('chapters')
    ).order_by('-updated_at')
    return JsonResponse({"results": [ebook_data(e, e.n_chapters) for e in qs]})


@login_required
@require_GET
def bookmarked_ebooks(request):
    rows = EbookBookmark.objects.filter(
        user=request.user, ebook__status='published'
    ).select_related('ebook', 'ebook__user')
    return JsonResponse({"results": [ebook_data(b.ebook) for b in rows]})


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
def ebook_detail(request, ebook_id):
    if request.method != "GET":
        if not request.user.is_authenticated:
            return error("Authentication required", status=401)
        ebook = _own_ebook(request, ebook_id)
        if request.method == "DELETE":
            ebook.delete()
            return JsonResponse({"message": "Ebook deleted"})
        try:
            fields = _clean_ebook_fields(json_body(request), ebook)
        except ValueError as e:
            return error(str(e))
        for name, value in fields.items():
            setattr(ebook, name, value)
        ebook.save(update_fields=[*fields, 'updated_at'])
        return JsonResponse({"ebook": ebook_data(ebook)})

    ebook = _visible_ebook(request, ebook_id)
    if ebook is None:
        return error("Ebook not found", status=404)

    if ebook.status == 'published':
        Ebook.increment(ebook.id, 'views_count')
        ebook.refresh_from_db(fields=['views_count'])

    chapters = list(ebook.chapters.order_by('chapter_order'))
    data = ebook_data(ebook, len(chapters))
    data["chapters"] = [chapter_data(c) for c in chapters]
    if request.user.is_authenticated:
        data["is_liked"] = EbookLike.objects.filter(ebook=ebook, user=request.user).exists()
        data["is_bookmarked"] = EbookBookmark.objects.filter(ebook=ebook, user=request.user).exists()
    return JsonResponse(data)


# ============================================================================
# SECTION 2: CHAPTERS
# ============================================================================

@login_required
@require_POST
def add_chapter(request, ebook_id):
    ebook = _own_ebook(request, ebook_id)
    data = json_body(request)
    title = text_field(data, 'title')
    if not title:
        return error("Chapter title required")

    order = data.get('chapter_order')
    try:
        order = ebook.chapters.count() + 1 if order in (None, '') else int(order)
    except (TypeError, ValueError):
        return error("chapter_order must be a number")
    chapter = EbookChapter.objects.create(
        ebook=ebook,
        title=title,
        content=text_field(data, 'content', strip=False),
        chapter_order=order,
    )
    ebook.save(update_fields=['updated_at'])
    return JsonResponse({"chapter": chapter_data(chapter)}, status=201)


@login_required
@require_http_methods(["PUT", "PATCH", "DELETE"])
def chapter_detail(request, chapter_id):
    chapter = get_object_or_404(EbookChapter, id=chapter_id, ebook__user=request.user)
    if request.method == "DELETE":
        chapter.delete()
        return JsonResponse({"message": "Chapter deleted"})

    data = json_body(request)
    if 'title' in data:
        title = text_field(data, 'title')
        if not title:
            return error("Chapter title required")
        chapter.title = title
    if 'content' in data:
        chapter.content = text_field(data, 'content', strip=False)
    if 'chapter_order' in data:
        try:
            chapter.chapter_order = int(data['chapter_order'])
        except (TypeError, ValueError):
            return error("chapter_order must be a number")
    chapter.save()
    return JsonResponse({"chapter": chapter_data(chapter)})


# ============================================================================
# SECTION 3: REVIEWS, LIKES & BOOKMARKS
# ============================================================================

@require_http_methods(["GET", "POST"])
def ebook_reviews(request, ebook_id):
    ebook = _visible_ebook(request, ebook_id)
    if ebook is None:
        return error("Ebook not found", status=404)

    if request.method == "GET":
        qs = EbookReview.objects.filter(ebook=ebook).select_related('user').order_by('-created_at')
        return JsonResponse({"results": [review_data(r) for r in qs]})

    if not request.user.is_authenticated:
        return error("Authentication required", status=401)

    data = json_body(request)
    try:
        rating = int(data.get('rating'))
    except (TypeError, ValueError):
        return error("Rating must be a number from 1 to 5")
    if not 1 <= rating <= 5:
        return error("Rating must be a number from 1 to 5")
    if EbookReview.objects.filter(ebook=ebook, user=request.user).exists():
        return error("You have already reviewed this ebook")

    with transaction.atomic():
        review = EbookReview.objects.create(
            ebook=ebook,
            user=request.user,
            rating=rating,
            content=text_field(data, 'content'),
        )
        _refresh_rating(ebook)
    return JsonResponse({"review": review_data(review)}, status=201)


@login_required
@require_http_methods(["DELETE", "POST"])
def delete_review(request, review_id):
    review = get_object_or_404(EbookReview, id=review_id, user=request.user)
    ebook = review.ebook
    with transaction.atomic():
        review.delete()
        _refresh_rating(ebook)
    return JsonResponse({"message": "Review deleted"})


@login_required
@require_POST
def toggle_ebook_like(request, ebook_id):
    ebook = get_object_or_404(Ebook, id=ebook_id, status='published')
    with transaction.atomic():
        like, created = EbookLike.objects.get_or_create(ebook=ebook, user=request.user)
        if created:
            Ebook.increment(ebook.id, 'likes_count')
        else:
            like.delete()
            Ebook.decrement(ebook.id, 'likes_count')
    ebook.refresh_from_db(fields=['likes_count'])
    return JsonResponse({"liked": created, "likes_count": ebook.likes_count})


@login_required
@require_POST
def toggle_ebook_bookmark(request, ebook_id):
    ebook = get_object_or_404(Ebook, id=ebook_id, status='published')
    bookmark, created = EbookBookmark.objects.get_or_create(ebook=ebook, user=request.user)
    if not created:
        bookmark.delete()
    return JsonResponse({"bookmarked": created})
