"""Built-in document templates.

Logic lives in templates.py; this file is pure data. Work item templates carry
a ``{{name}}`` placeholder. Every template starts PROPOSED in discovery and
lists checkbox tasks under each of the four ``## <Name> Phase`` sections, which
is what phase gating reads.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Work item templates
# ---------------------------------------------------------------------------

FEATURE_TEMPLATE = """\
# Feature: {{name}}

## Status: PROPOSED
## Phase: discovery
## Progress: 0%
## Assigned To: human

## Overview
Describe the feature and the problem it solves.

## Discovery Phase
- [ ] Define the problem and the users affected
- [ ] Review existing code and prior art
- [ ] Document requirements and acceptance criteria

## Planning Phase
- [ ] Design the solution
- [ ] Break the work into implementation steps
- [ ] Identify risks and dependencies

## Execution Phase
- [ ] Implement the feature
- [ ] Write tests
- [ ] Update documentation

## Cleanup Phase
- [ ] Remove dead code and temporary scaffolding
- [ ] Run the full test suite
- [ ] Request review

## Notes
"""

BUG_TEMPLATE = """\
# Bug: {{name}}

## Status: PROPOSED
## Phase: discovery
## Progress: 0%
## Assigned To: human

## Description
What happens, and what should happen instead.

## Steps to Reproduce
1.

## Discovery Phase
- [ ] Reproduce the bug
- [ ] Identify the root cause
- [ ] Assess impact and severity

## Planning Phase
- [ ] Decide on the fix
- [ ] Plan a regression test

## Execution Phase
- [ ] Write a failing test
- [ ] Implement the fix
- [ ] Verify the fix

## Cleanup Phase
- [ ] Check for similar bugs elsewhere
- [ ] Update documentation
- [ ] Request review

## Notes
"""

EXPERIMENT_TEMPLATE = """\
# Experiment: {{name}}

## Status: PROPOSED
## Phase: discovery
## Progress: 0%
## Assigned To: human

## Hypothesis
What we expect to learn, and how we will know.

## Discovery Phase
- [ ] State the hypothesis
- [ ] Define success metrics
- [ ] Survey related work

## Planning Phase
- [ ] Design the experiment
- [ ] Prepare data and environment

## Execution Phase
- [ ] Run the experiment
- [ ] Collect results
- [ ] Analyze results

## Cleanup Phase
- [ ] Document findings
- [ ] Decide whether to adopt, iterate or abandon
- [ ] Remove experimental code that will not be kept

## Notes
"""

WORK_ITEM_TEMPLATES: dict[str, str] = {
    "feature": FEATURE_TEMPLATE,
    "bug": BUG_TEMPLATE,
    "experiment": EXPERIMENT_TEMPLATE,
}

# ---------------------------------------------------------------------------
# Postmortem
# ---------------------------------------------------------------------------

POSTMORTEM_TEMPLATE = """\
# Postmortem: {name}

## Completion Date
{date}

## Summary
- [ ] What was accomplished?
- [ ] Key challenges faced?
- [ ] Lessons learned?

## Metrics
- Development time:
- Lines of code added/modified:
- Tests added:

## What Went Well
-

## What Could Be Improved
-

## Follow-up Items
- [ ] Documentation updates needed
- [ ] Technical debt created
- [ ] Future enhancements identified
"""

# ---------------------------------------------------------------------------
# Contributor instructions
# ---------------------------------------------------------------------------

INSTRUCTIONS_TEMPLATE = """\
# Project Management Instructions

Work is tracked as markdown documents, one directory per work item:

- Active work items: `{{backlog_dir}}/<type>-<name>/README.md`
- Completed work items: `{{completed_dir}}/<type>-<name>/README.md`

The README is the source of truth. Edit prose freely; docpm only rewrites the
`## Status:`, `## Phase:`, `## Progress:` and `## Assigned To:` lines and the
task checkboxes.

## When to Create a Work Item

- `docpm new feature <name>` for new functionality
- `docpm new bug <name>` for defects
- `docpm new experiment <name>` for spikes and prototypes

## Workflow

Each work item moves through four phases:

1. **Discovery**: understand the problem, gather requirements.
2. **Planning**: design the solution and break it into steps.
3. **Execution**: implement, test and document.
4. **Cleanup**: tidy up, review and sign off.

`docpm phase advance <name>` moves to the next step. An item cannot leave a
phase until every task listed under that phase's heading is checked. Use
`docpm phase tasks <name>` to see them and `docpm phase complete <name> <n>`
to check one off.

## Responsibilities

- Humans own discovery and final review.
- Agents are assigned automatically on entering execution when the item is
  still assigned to `human`.
- Keep the progress line current with `docpm progress update`.

## Finishing

When the item reaches COMPLETED, run `docpm archive <name>`. The directory
moves to `{{completed_dir}}` and a POSTMORTEM.md is generated next to the
README. Fill it in while the work is fresh.
"""
