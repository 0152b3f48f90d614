"""GraphQL documents used by the field sync.

Values always travel as GraphQL variables. ``PAGE_SIZE`` bounds every
connection; lists longer than that are truncated without notice.
"""

from __future__ import annotations

PAGE_SIZE = 50

LINKED_ISSUES_QUERY = """
query($pullRequestId: ID!, $first: Int!) {
  node(id: $pullRequestId) {
    ... on PullRequest {
      id
      title
      number
      closingIssuesReferences(first: $first) {
        nodes {
          id
          number
          title
          projectsV2(first: $first) {
            nodes {
              id
              title
              fields(first: $first) {
                nodes {
                  ... on ProjectV2SingleSelectField {
                    id
                    name
                    options {
                      id
                      name
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

# The id of an issue's association with a board is not readable directly.
# Adding an item that is already on the board is a no-op that returns it.
ADD_ITEM_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item {
      id
    }
  }
}
"""

UPDATE_FIELD_MUTATION = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(
    input: {projectId: $projectId, itemId: $itemId, fieldId: $fieldId, value: {singleSelectOptionId: $optionId}}
  ) {
    clientMutationId
  }
}
"""

__all__ = ["PAGE_SIZE", "LINKED_ISSUES_QUERY", "ADD_ITEM_MUTATION", "UPDATE_FIELD_MUTATION"]
