from __future__ import annotations

from keepdefense.core.rules.placement import check_build, check_unlock, check_upgrade

from .actions import ActionSpaceSpec


def slot_tower_id(state, slot_id: int) -> int | None:
    if slot_id < 0 or slot_id >= len(state.slots):
        return None
    return state.slots[slot_id].tower_id


def compute_action_mask(state, spec: ActionSpaceSpec) -> list[bool]:
    """
    One entry per discrete action. Noop is always allowed; every other entry
    is True only when the matching command would be accepted right now.
    """
    mask = [False] * spec.num_actions
    mask[spec.offsets.noop] = True
    if not state.running:
        return mask

    slot_count = min(len(state.slots), spec.max_slots)
    for slot_id in range(slot_count):
        if check_unlock(state, slot_id) is None:
            mask[spec.offsets.unlock + slot_id] = True

        for kind_idx, kind in enumerate(spec.tower_kinds):
            if check_build(state, slot_id, kind) is None:
                mask[spec.offsets.build + kind_idx * spec.max_slots + slot_id] = True

        tower_id = slot_tower_id(state, slot_id)
        if tower_id is not None and check_upgrade(state, tower_id) is None:
            mask[spec.offsets.upgrade + slot_id] = True
    return mask
