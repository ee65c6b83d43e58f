"""Platform: a bilingual forum with locale-aware routing.

English is served without a prefix (``/forum/new``), Turkish under
``/tr`` (``/tr/forum/new``). Every link, redirect and sign-in bounce
stays in the visitor's locale.

Demonstrates:
- ``App(i18n=LocaleConfig(...))`` with message catalogs
- ``link()``, ``t()``, ``alternates()`` and ``current_locale()`` in templates
- ``Navigator`` injection and ``navigate()`` after a form post
- ``GuardMiddleware`` with localized login redirects
- ``safe_redirect_target`` for the post-login bounce

Sign in as ``ayse`` or ``mehmet`` (no password, it's a demo).

Run:
    python app.py
"""

from dataclasses import dataclass
from pathlib import Path

from warbler import App, AppConfig, LocaleConfig, Navigator, Request, Response, RouteTarget, Template
from warbler.context import g
from warbler.errors import NotFound
from warbler.middleware import GuardConfig, GuardMiddleware, safe_redirect_target

HERE = Path(__file__).parent

# ---------------------------------------------------------------------------
# In-memory data
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Snippet:
    id: int
    title: str
    author: str


USERS: dict[str, User] = {
    "ayse": User(id="ayse", name="Ayşe"),
    "mehmet": User(id="mehmet", name="Mehmet"),
}
SNIPPETS: dict[int, Snippet] = {}


async def authenticate(request: Request) -> User | None:
    return USERS.get(request.cookies.get("user", ""))


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = App(
    AppConfig(template_dir=str(HERE / "templates")),
    i18n=LocaleConfig(
        locales=("en", "tr"),
        default_locale="en",
        messages_dir=HERE / "messages",
    ),
)
app.add_middleware(GuardMiddleware(GuardConfig(authenticate=authenticate)))


@app.template_global()
def current_user() -> User | None:
    return g.get("user")


@app.route("/", name="home")
def home():
    return Template("home.html")


@app.route("/forum/new")
def new_thread():
    return Template("forum_new.html")


@app.route("/feed")
def feed():
    snippets = sorted(SNIPPETS.values(), key=lambda s: s.id, reverse=True)
    return Template("feed.html", user=g.user, snippets=snippets)


@app.route("/snippets/new")
def new_snippet():
    return Template("snippets/new.html")


@app.route("/snippets/new", methods=["POST"])
async def create_snippet(request: Request, nav: Navigator):
    form = await request.form()
    title = (form.get("title") or "").strip()
    if not title:
        return Template("snippets/new.html", error=True), 422
    snippet = Snippet(id=len(SNIPPETS) + 1, title=title, author=g.user.id)
    SNIPPETS[snippet.id] = snippet
    await nav.navigate(RouteTarget("/snippets/{id}", {"id": snippet.id}))


@app.route("/snippets/{id:int}", name="snippet")
def show_snippet(id: int):
    snippet = SNIPPETS.get(id)
    if snippet is None:
        raise NotFound(f"No snippet {id}")
    return Template("snippets/show.html", snippet=snippet)


@app.route("/users/{id}", name="user")
def profile(id: str):
    user = USERS.get(id)
    if user is None:
        raise NotFound(f"No user {id}")
    return Template("profile.html", profile=user)


@app.route("/login")
def login_form(request: Request):
    return Template("login.html", redirect=request.query.get("redirect", ""))


@app.route("/login", methods=["POST"])
async def login(request: Request):
    form = await request.form()
    user = USERS.get(form.get("username") or "")
    if user is None:
        redirect = request.query.get("redirect", "")
        return Template("login.html", redirect=redirect, error=True), 401
    # The form posts back to its own URL, so ?redirect= is still on the query
    target = safe_redirect_target(request)
    return (
        Response("")
        .with_status(303)
        .with_header("Location", target)
        .with_cookie("user", user.id)
    )


@app.route("/logout", methods=["POST"])
def logout(nav: Navigator):
    return (
        Response("")
        .with_status(303)
        .with_header("Location", nav.render_link("/"))
        .without_cookie("user")
    )


@app.route("/api/locales")
def locales():
    router = app.locale_router
    return {"locales": list(router.config.locales), "default": router.config.default_locale}


@app.error(404)
def not_found(request: Request):
    return Template("not_found.html", path=request.raw_path)


if __name__ == "__main__":
    app.run()
