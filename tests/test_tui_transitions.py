from lazytask.application.bulk import BulkFailure, BulkResult
from lazytask.interface.tui_models import (
    CreateTask,
    DashboardState,
    DeleteTasks,
    MarkTasks,
    Mode,
    Quit,
    SearchMode,
    UpdateTasks,
    visible_tasks,
)
from lazytask.interface.tui_transitions import apply_result, decode, reduce


def press(state, tasks, *keys):
    effect = None
    for key in keys:
        effect = reduce(state, tasks, key)
    return effect


def test_navigation_is_clamped(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "k")
    assert state.selected_index == 0
    press(state, sample_tasks, "j", "down", "j", "j", "j")
    assert state.selected_index == 3
    press(state, sample_tasks, "g")
    assert state.selected_index == 0
    press(state, sample_tasks, "G")
    assert state.selected_index == 3


def test_ctrl_c_quits_from_any_mode(sample_tasks):
    for mode in Mode:
        state = DashboardState(mode=mode)
        assert isinstance(press(state, sample_tasks, "ctrl-c"), Quit)
        assert not state.running


def test_q_quits_from_view_but_types_in_forms(sample_tasks):
    state = DashboardState()
    assert isinstance(press(state, sample_tasks, "q"), Quit)

    state = DashboardState()
    press(state, sample_tasks, "a", "q")
    assert state.running
    assert state.form.values["description"] == "q"


def test_unmapped_key_is_ignored():
    assert decode(Mode.VIEW, "z") is None
    assert decode(Mode.MARK, "x") is None
    assert decode(Mode.ADD, "z").name == "text"


def test_add_form_produces_create_effect(sample_tasks):
    state = DashboardState()
    effect = press(state, sample_tasks, "a", *"Buy milk", "tab", "right", "enter")
    assert isinstance(effect, CreateTask)
    assert effect.values["description"] == "Buy milk"
    assert effect.values["priority"] == "high"
    assert effect.values["tags"] == []
    assert effect.values["due_date"] is None


def test_add_form_rejects_empty_description(sample_tasks):
    state = DashboardState()
    effect = press(state, sample_tasks, "a", " ", "enter")
    assert effect is None
    assert state.mode == Mode.ADD
    assert state.messages[-1].text == "Description cannot be empty"
    assert state.messages[-1].level == "error"


def test_add_form_rejects_bad_due_date(sample_tasks):
    state = DashboardState()
    effect = press(state, sample_tasks, "a", "x", "tab", "tab", "tab", "tab", *"soon", "enter")
    assert effect is None
    assert "Invalid due date: soon" in state.messages[-1].text


def test_form_backspace_and_field_wrap(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "a", "a", "b", "backspace", "up")
    assert state.form.values["description"] == "a"
    assert state.form.active_field == "tags"


def test_update_form_is_prefilled(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "j", "j", "u")
    assert state.mode == Mode.UPDATE
    assert state.form.task_id == 3
    assert state.form.values["description"] == "Fix login bug"
    effect = press(state, sample_tasks, *"!", "enter")
    assert isinstance(effect, UpdateTasks)
    assert effect.ids == [3]
    assert effect.changes["description"] == "Fix login bug!"
    assert effect.changes["status"] == "in-progress"


def test_escape_cancels_form(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "enter", "x", "escape")
    assert state.mode == Mode.VIEW
    assert state.form is None


def test_update_without_tasks_reports_error():
    state = DashboardState()
    assert press(state, [], "u") is None
    assert state.messages[-1].text == "No task selected"
    assert state.mode == Mode.VIEW


def test_single_delete_needs_confirmation(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "j", "d")
    assert state.mode == Mode.DELETE_CONFIRM
    assert state.target_ids == [2]
    assert press(state, sample_tasks, "n") is None
    assert state.mode == Mode.VIEW

    press(state, sample_tasks, "d")
    effect = press(state, sample_tasks, "y")
    assert effect == DeleteTasks([2])


def test_mark_menu_starts_at_current_status(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "j", "j", "m")
    assert state.mode == Mode.MARK
    assert state.menu_index == 1
    effect = press(state, sample_tasks, "down", "down", "enter")
    assert effect == MarkTasks([3], "done")


def test_multi_select_routes_actions_to_bulk_menu(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "j", "j", " ")
    assert state.multi_select
    assert state.selected_ids == {1, 3}
    press(state, sample_tasks, "d")
    assert state.mode == Mode.BULK_MENU
    assert state.target_ids == [1, 3]


def test_space_outside_multi_select_does_nothing(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, " ")
    assert state.selected_ids == set()


def test_leaving_multi_select_clears_selection(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "tab")
    assert not state.multi_select
    assert state.selected_ids == set()


def test_bulk_menu_mark(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "j", " ", "u", "enter")
    assert state.mode == Mode.MARK
    effect = press(state, sample_tasks, "j", "enter")
    assert effect == MarkTasks([1, 2], "in-progress")


def test_bulk_menu_update_priority_and_tags(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "u", "down", "enter")
    assert state.mode == Mode.BULK_UPDATE
    effect = press(state, sample_tasks, "right", "right", "down", "right", "enter")
    assert effect == UpdateTasks([1], {"priority": "medium", "tags": []})


def test_bulk_update_without_choices_changes_nothing(sample_tasks):
    state = DashboardState()
    effect = press(state, sample_tasks, "tab", " ", "u", "down", "enter", "enter")
    assert effect is None
    assert state.mode == Mode.VIEW
    assert state.messages[-1].text == "No changes made."


def test_bulk_menu_delete_then_confirm(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "j", " ", "u", "down", "down", "enter")
    assert state.mode == Mode.BULK_DELETE_CONFIRM
    assert press(state, sample_tasks, "y") == DeleteTasks([1, 2])


def test_bulk_menu_cancel_keeps_selection(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", " ", "u", "up", "down", "down", "down", "enter")
    assert state.mode == Mode.VIEW
    assert state.selected_ids == {1}


def test_exact_search_filters_and_escape_clears(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "/", *"groc", "enter")
    assert state.search_mode == SearchMode.EXACT
    assert [t.id for t in visible_tasks(state, sample_tasks)] == [2]
    press(state, sample_tasks, "escape")
    assert state.search_mode == SearchMode.INACTIVE
    assert len(visible_tasks(state, sample_tasks)) == 4


def test_fuzzy_search(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "?", *"vacaton", "enter")
    assert state.search_mode == SearchMode.FUZZY
    assert [t.id for t in visible_tasks(state, sample_tasks)] == [4]


def test_search_reopens_with_current_term(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "/", *"bug", "enter", "/")
    assert state.search_input == "bug"
    press(state, sample_tasks, "backspace", "backspace", "backspace", "enter")
    assert state.search_mode == SearchMode.INACTIVE


def test_search_escape_discards_input(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "/", *"xyz", "escape")
    assert state.mode == Mode.VIEW
    assert state.search_mode == SearchMode.INACTIVE


def test_sort_keys_cycle_and_reverse(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "o")
    assert state.sort_field == "due-date"
    press(state, sample_tasks, "o", "r")
    assert state.sort_field == "priority"
    assert state.sort_order == "desc"
    assert [t.id for t in visible_tasks(state, sample_tasks)] == [3, 1, 4, 2]
    assert state.messages[-1].text == "Sort: priority (desc)"


def test_stats_and_help_toggle(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "s")
    assert state.stats_view
    press(state, sample_tasks, "h")
    assert state.mode == Mode.HELP
    press(state, sample_tasks, "escape")
    assert state.mode == Mode.VIEW


def test_messages_are_cleared_by_next_action(sample_tasks):
    state = DashboardState()
    state.info("old")
    press(state, sample_tasks, "j")
    assert state.messages == []


def test_apply_result_narrows_selection_to_failures():
    state = DashboardState(mode=Mode.MARK, multi_select=True, selected_ids={1, 2, 3}, target_ids=[1, 2, 3])
    result = BulkResult(success_count=2, failed_count=1, errors=[BulkFailure(2, "Task already has status: done")])

    apply_result(state, MarkTasks([1, 2, 3], "done"), result)

    assert state.mode == Mode.VIEW
    assert state.selected_ids == {2}
    assert [m.text for m in state.messages] == ["Task 2: Task already has status: done", "2 task(s) marked as done."]
    assert [m.level for m in state.messages] == ["error", "info"]


def test_apply_result_clears_selection_on_full_success():
    state = DashboardState(multi_select=True, selected_ids={1, 2})
    apply_result(state, DeleteTasks([1, 2]), BulkResult(success_count=2))
    assert state.selected_ids == set()
    assert state.multi_select
    assert state.messages[-1].text == "2 task(s) deleted."


def test_apply_result_keeps_add_form_open_on_validation_error():
    state = DashboardState(mode=Mode.ADD)
    result = BulkResult()
    result.fail(0, "Invalid priority: nope")
    apply_result(state, CreateTask({"description": "x"}), result)
    assert state.mode == Mode.ADD
    assert state.messages[-1].text == "Invalid priority: nope"


def test_apply_result_leaves_form_after_storage_failure():
    state = DashboardState(mode=Mode.ADD)
    result = BulkResult(rolled_back=True)
    result.fail(5, "Storage error: disk full")
    apply_result(state, CreateTask({"description": "x"}), result)
    assert state.mode == Mode.VIEW
    assert state.messages[-1].level == "error"


def test_apply_result_reports_create():
    state = DashboardState(mode=Mode.ADD)
    apply_result(state, CreateTask({"description": "x"}), BulkResult(success_count=1))
    assert state.mode == Mode.VIEW
    assert state.messages[-1].text == "Task added."


def test_multi_select_without_selection_blocks_single_task_actions(sample_tasks):
    for key in ("u", "enter", "d", "m"):
        state = DashboardState()
        effect = press(state, sample_tasks, "tab", key)
        assert effect is None
        assert state.mode == Mode.VIEW
        assert state.form is None
        assert state.target_ids == []
        assert state.messages[-1].text == "Select tasks first (space)"
        assert state.messages[-1].level == "info"


def test_single_actions_work_again_after_leaving_multi_select(sample_tasks):
    state = DashboardState()
    press(state, sample_tasks, "tab", "d", "tab", "d")
    assert state.mode == Mode.DELETE_CONFIRM
    assert state.target_ids == [1]


def test_apply_result_keeps_selection_for_effect_outside_it():
    state = DashboardState(mode=Mode.MARK, multi_select=True, target_ids=[2])
    result = BulkResult()
    result.fail(2, "Task already has status: done")

    apply_result(state, MarkTasks([2], "done"), result)

    assert state.selected_ids == set()
    assert state.mode == Mode.VIEW
    assert state.messages[-1].text == "Task 2: Task already has status: done"
