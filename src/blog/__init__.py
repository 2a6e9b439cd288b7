from src.blog.models import BlogPost, BlogPostUpdate, NewBlogPost
from src.blog.repository import (
    blog_post_exists_with_slug,
    count_blog_posts,
    create_blog_post,
    get_blog_post_by_id,
    get_blog_post_by_slug,
    get_blog_posts_by_tag,
    get_recent_blog_posts,
    hard_delete_blog_post,
    list_blog_posts,
    publish_blog_post,
    search_blog_posts,
    soft_delete_blog_post,
    update_blog_post,
)
from src.blog.slug import slugify

__all__ = [
    "BlogPost", "BlogPostUpdate", "NewBlogPost", "slugify",
    "create_blog_post", "get_blog_post_by_id", "get_blog_post_by_slug", "update_blog_post",
    "publish_blog_post", "list_blog_posts", "count_blog_posts", "get_recent_blog_posts",
    "search_blog_posts", "get_blog_posts_by_tag", "blog_post_exists_with_slug",
    "soft_delete_blog_post", "hard_delete_blog_post",
]
