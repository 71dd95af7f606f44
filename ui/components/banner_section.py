"""Banner configuration component."""

import streamlit as st
from pydantic import ValidationError

from banner import COLORS, BannerConfig, Color, PityPolicy, PoolVariant
from ui.constants import COLOR_HEX, COLOR_LABELS
from ui.defaults import RATE_PRESETS
from ui.state import set_banner


def _apply_banner_change(**changes):
    """Rebuild the banner with `changes`, keeping the old one if invalid."""
    data = st.session_state.banner.model_dump()
    data.update(changes)
    try:
        set_banner(BannerConfig(**data))
    except ValidationError as e:
        st.session_state.banner_error = e.errors()[0]["msg"]
    else:
        st.session_state.banner_error = None


def _on_focus_size_change(idx: int):
    sizes = list(st.session_state.banner.focus_sizes)
    sizes[idx] = st.session_state[f"focus_size_{idx}"]
    _apply_banner_change(focus_sizes=sizes)


def _on_rates_change():
    _apply_banner_change(starting_rates=st.session_state.banner_rates)


def _on_text_change():
    parsed = BannerConfig.parse(st.session_state.banner_text)
    if parsed is None:
        st.session_state.banner_error = "Format: r/b/g/c (focus, 5*), e.g. 1/1/1/1 (3, 3)"
        return
    _apply_banner_change(
        focus_sizes=parsed.focus_sizes, starting_rates=parsed.starting_rates
    )


def _on_options_change():
    bonus = st.session_state.banner_bonus
    _apply_banner_change(
        focus_charges=st.session_state.banner_focus_charges,
        fourstar_special=st.session_state.banner_special,
        fourstar_focus=None if bonus == "none" else Color(bonus),
        pool_variant=PoolVariant(st.session_state.banner_pool_variant),
        pity_policy=PityPolicy(st.session_state.banner_pity_policy),
    )


def render_banner_section():
    """Render the banner editor."""
    banner: BannerConfig = st.session_state.banner
    st.header("Banner")

    with st.container(border=True):
        rate_options = list(RATE_PRESETS.keys())
        if banner.starting_rates not in RATE_PRESETS:
            rate_options.append(banner.starting_rates)
        st.selectbox(
            "Starting rates",
            rate_options,
            index=rate_options.index(banner.starting_rates),
            format_func=lambda r: RATE_PRESETS.get(r, f"{r[0]}%/{r[1]}%"),
            key="banner_rates",
            on_change=_on_rates_change,
        )

        st.markdown("**Focus units per color**")
        cols = st.columns(len(COLORS))
        for idx, (col, color) in enumerate(zip(cols, COLORS)):
            with col:
                st.markdown(
                    f"<span style='color: {COLOR_HEX[color]}; font-weight: bold;'>"
                    f"{COLOR_LABELS[color]}</span>",
                    unsafe_allow_html=True,
                )
                st.number_input(
                    COLOR_LABELS[color],
                    min_value=0,
                    max_value=10,
                    value=banner.focus_sizes[idx],
                    step=1,
                    key=f"focus_size_{idx}",
                    on_change=_on_focus_size_change,
                    args=(idx,),
                    label_visibility="collapsed",
                )

        st.text_input(
            "Short form",
            value=str(banner),
            key="banner_text",
            on_change=_on_text_change,
            help="r/b/g/c focus counts, then (focus, 5*) starting rates.\n"
            "E.g. hero fest is 1/1/1/1 (5, 3), legendary is 3/3/3/3 (8, 0).",
        )

        with st.expander("Advanced", expanded=False):
            col1, col2 = st.columns(2)
            with col1:
                st.checkbox(
                    "Focus charges",
                    value=banner.focus_charges,
                    key="banner_focus_charges",
                    on_change=_on_options_change,
                    help="Three non-focus 5* units guarantee that the next 5* is a focus unit",
                )
                st.checkbox(
                    "4* special rate",
                    value=banner.fourstar_special,
                    key="banner_special",
                    on_change=_on_options_change,
                )
                bonus_options = ["none"] + [color.value for color in COLORS]
                current_bonus = (
                    banner.fourstar_focus.value if banner.fourstar_focus else "none"
                )
                st.selectbox(
                    "Bonus unit color",
                    bonus_options,
                    index=bonus_options.index(current_bonus),
                    format_func=lambda v: "None" if v == "none" else COLOR_LABELS[Color(v)],
                    key="banner_bonus",
                    on_change=_on_options_change,
                    help="The first focus unit of this color also appears at 4*",
                )
            with col2:
                variants = [variant.value for variant in PoolVariant]
                st.selectbox(
                    "Pool size table",
                    variants,
                    index=variants.index(banner.pool_variant.value),
                    key="banner_pool_variant",
                    on_change=_on_options_change,
                )
                policies = [policy.value for policy in PityPolicy]
                st.selectbox(
                    "Pity policy",
                    policies,
                    index=policies.index(banner.pity_policy.value),
                    key="banner_pity_policy",
                    on_change=_on_options_change,
                    help="reset: any 5* resets the rate. "
                    "decay: only focus resets, other 5* units remove 20 summons.",
                )

        if st.session_state.get("banner_error"):
            st.error(st.session_state.banner_error)
