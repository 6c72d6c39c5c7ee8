import logging

from errors import NavigationError
from models.post import Post
from models.view_state import CreateView, DetailView, ListView, ViewState

logger = logging.getLogger(__name__)


class ViewController:
    """
    Selects which of the List, Create and Detail views is active

    Allowed moves:
        List   -- select_post(p) --> Detail(p)
        List   -- start_create   --> Create
        Create -- cancel         --> List
        Create -- post_created   --> List
        Detail -- back           --> List

    Anything else raises NavigationError and keeps the current view. Every move
    creates a new state object, so is_showing() tells a caller that captured a
    view before awaiting whether that view is still the one on screen.
    """

    def __init__(self):
        self._state: ViewState = ListView()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def mode(self) -> str:
        return self._state.mode

    def is_showing(self, state: ViewState) -> bool:
        return self._state is state

    def select_post(self, post: Post) -> DetailView:
        self._require("list", "select a post")
        if post is None:
            raise NavigationError("Cannot open the detail view without a post")
        return self._move(DetailView(post=post))

    def start_create(self) -> CreateView:
        self._require("list", "start a new post")
        return self._move(CreateView())

    def cancel(self) -> ListView:
        self._require("create", "cancel")
        return self._move(ListView())

    def post_created(self) -> ListView:
        self._require("create", "finish creating a post")
        return self._move(ListView())

    def back(self) -> ListView:
        self._require("detail", "go back")
        return self._move(ListView())

    def _require(self, mode: str, action: str):
        if self._state.mode != mode:
            raise NavigationError(f"Cannot {action} from the {self._state.mode} view")

    def _move(self, state):
        logger.debug("View %s -> %s", self._state.mode, state.mode)
        self._state = state
        return state
