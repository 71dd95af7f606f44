"""Goal editor component."""

import streamlit as st

from banner import COLORS, Color
from goal import CustomGoal, GoalKind, GoalPart, GoalPreset, PresetGoal, as_custom
from ui.constants import COLOR_LABELS
from ui.defaults import PRESET_LABELS
from ui.state import goal_is_available, set_goal


def _on_mode_change():
    goal = st.session_state.goal
    if st.session_state.goal_mode == "custom" and isinstance(goal, PresetGoal):
        set_goal(as_custom(goal, st.session_state.banner))
    elif st.session_state.goal_mode == "preset" and isinstance(goal, CustomGoal):
        set_goal(PresetGoal())


def _on_preset_change():
    set_goal(
        PresetGoal(
            preset=GoalPreset(st.session_state.goal_preset),
            count=st.session_state.goal_count,
        )
    )


def _on_kind_change():
    goal: CustomGoal = st.session_state.goal
    set_goal(goal.model_copy(update={"kind": GoalKind(st.session_state.goal_kind)}))


def _on_part_change(idx: int):
    goal: CustomGoal = st.session_state.goal.model_copy(deep=True)
    goal.parts[idx] = GoalPart(
        color=Color(st.session_state[f"goal_part_color_{idx}"]),
        num_copies=st.session_state[f"goal_part_copies_{idx}"],
        bonus_only=st.session_state[f"goal_part_bonus_{idx}"],
        any_fivestar=st.session_state[f"goal_part_fivestar_{idx}"],
    )
    set_goal(goal)


def _add_part():
    goal: CustomGoal = st.session_state.goal.model_copy(deep=True)
    goal.parts.append(GoalPart())
    set_goal(goal)


def _remove_part(idx: int):
    goal: CustomGoal = st.session_state.goal.model_copy(deep=True)
    goal.parts.pop(idx)
    set_goal(goal)


def _render_preset(goal: PresetGoal):
    col1, col2 = st.columns([3, 1])
    presets = [preset.value for preset in GoalPreset]
    with col1:
        st.selectbox(
            "Goal",
            presets,
            index=presets.index(goal.preset.value),
            format_func=lambda v: PRESET_LABELS[GoalPreset(v)],
            key="goal_preset",
            on_change=_on_preset_change,
        )
    with col2:
        st.number_input(
            "Copies",
            min_value=1,
            value=goal.count,
            step=1,
            key="goal_count",
            on_change=_on_preset_change,
        )


def _render_custom(goal: CustomGoal):
    kinds = [kind.value for kind in GoalKind]
    st.radio(
        "Finish when",
        kinds,
        index=kinds.index(goal.kind.value),
        format_func=lambda v: "any part is met" if v == "any" else "every part is met",
        key="goal_kind",
        on_change=_on_kind_change,
        horizontal=True,
    )
    colors = [color.value for color in COLORS]
    for idx, part in enumerate(goal.parts):
        col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
        with col1:
            st.selectbox(
                "Color",
                colors,
                index=colors.index(part.color.value),
                format_func=lambda v: COLOR_LABELS[Color(v)],
                key=f"goal_part_color_{idx}",
                on_change=_on_part_change,
                args=(idx,),
            )
        with col2:
            st.number_input(
                "Copies",
                min_value=1,
                value=part.num_copies,
                step=1,
                key=f"goal_part_copies_{idx}",
                on_change=_on_part_change,
                args=(idx,),
            )
        with col3:
            st.checkbox(
                "Bonus unit",
                value=part.bonus_only,
                key=f"goal_part_bonus_{idx}",
                on_change=_on_part_change,
                args=(idx,),
            )
            st.checkbox(
                "Any 5*",
                value=part.any_fivestar,
                key=f"goal_part_fivestar_{idx}",
                on_change=_on_part_change,
                args=(idx,),
                help="Count regular 5* units of this color too",
            )
        with col4:
            st.button("Remove", key=f"goal_part_remove_{idx}", on_click=_remove_part, args=(idx,))
    st.button("Add unit", key="goal_add_part", on_click=_add_part)


def render_goal_section():
    """Render the goal editor and its availability on the current banner."""
    goal = st.session_state.goal
    st.header("Goal")

    with st.container(border=True):
        modes = ["preset", "custom"]
        st.radio(
            "Goal type",
            modes,
            index=0 if isinstance(goal, PresetGoal) else 1,
            format_func=str.capitalize,
            key="goal_mode",
            on_change=_on_mode_change,
            horizontal=True,
        )
        if isinstance(goal, PresetGoal):
            _render_preset(goal)
        else:
            _render_custom(goal)

        if not goal_is_available():
            st.warning("This goal cannot be reached on the current banner")
