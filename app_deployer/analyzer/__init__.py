"""Detection of language, framework, build tool and dependencies in source trees."""